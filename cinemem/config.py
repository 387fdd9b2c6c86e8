"""Configuration settings for cinemem."""

from functools import lru_cache

from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigurationError

DEFAULT_BACKEND_URL = "http://localhost:3000"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # OpenAI (file storage, vector store, agent model)
    openai_api_key: str
    vector_store_id: str
    openai_model: str = "gpt-4o-mini"

    # Trakt - optional, features degrade to memory-only when absent
    trakt_client_id: str | None = None
    trakt_access_token: str | None = None

    # Base URL of our own HTTP surface, used by the backend_request tool
    backend_url: str = DEFAULT_BACKEND_URL

    # Outbound calls
    request_timeout: float = 30.0

    # Agent
    agent_max_turns: int = 6
    agent_backend_tool: bool = False

    # App
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    trusted_proxy_cidrs: list[str] = []

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model

    @property
    def trakt_configured(self) -> bool:
        return bool(self.trakt_client_id and self.trakt_access_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        ConfigurationError: If OPENAI_API_KEY or VECTOR_STORE_ID is missing,
            or any variable fails to parse.
    """
    try:
        return Settings()
    except SettingsValidationError as e:
        names = sorted({str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")})
        raise ConfigurationError(f"Missing or invalid configuration: {', '.join(names)}") from e
