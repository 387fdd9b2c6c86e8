"""Trakt API client.

Thin async wrapper over the Trakt REST API (https://trakt.docs.apiary.io)
used to mirror watch history and watchlist changes. All calls carry the
client id and the user's OAuth access token; nothing is retried.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from cinemem.config import Settings
from cinemem.errors import ConfigurationError, TraktError, ValidationError

logger = logging.getLogger(__name__)

TRAKT_API_URL = "https://api.trakt.tv"
TRAKT_API_VERSION = "2"

DEFAULT_HISTORY_LIMIT = 200
MAX_HISTORY_LIMIT = 500

WATCHLIST_ACTIONS = ("add", "remove")

# Our field name -> Trakt ids key
_ID_KEYS = (
    ("trakt_id", "trakt"),
    ("imdb", "imdb"),
    ("slug", "slug"),
    ("tmdb", "tmdb"),
)


def build_ids(
    trakt_id: Any = None, imdb: Any = None, slug: Any = None, tmdb: Any = None
) -> Dict[str, Any]:
    """Map our identifier fields to a Trakt ``ids`` object.

    Raises:
        ValidationError: If no identifier is present.
    """
    given = {"trakt_id": trakt_id, "imdb": imdb, "slug": slug, "tmdb": tmdb}
    ids = {trakt_key: given[ours] for ours, trakt_key in _ID_KEYS if given[ours]}
    if not ids:
        raise ValidationError("No valid ids provided (need trakt_id, imdb, slug or tmdb)")
    return ids


def clamp_history_limit(limit: Any) -> int:
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 0
    return max(1, min(value or DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT))


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


class TraktClient:
    """Async Trakt client. Unconfigured instances refuse every call."""

    def __init__(
        self,
        client_id: Optional[str],
        access_token: Optional[str],
        *,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        base_url: str = TRAKT_API_URL,
    ):
        self._client_id = client_id
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TraktClient":
        return cls(
            settings.trakt_client_id,
            settings.trakt_access_token,
            timeout=settings.request_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._access_token)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("TRAKT_CLIENT_ID or TRAKT_ACCESS_TOKEN not configured")

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "trakt-api-version": TRAKT_API_VERSION,
            "trakt-api-key": self._client_id or "",
            "Authorization": f"Bearer {self._access_token}",
        }

    async def request(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Generic passthrough call; non-2xx responses are returned, not raised.

        Returns:
            ``{status, ok, headers, data}`` where data is parsed JSON when
            possible, else the raw text.
        """
        self._ensure_configured()
        if not path.startswith("/"):
            raise ValidationError("Trakt path must start with '/'")

        response = await self._http.request(
            method,
            f"{self._base_url}{path}",
            params=query or None,
            json=body if body and method != "GET" else None,
            headers=self._headers(),
        )
        return {
            "status": response.status_code,
            "ok": response.is_success,
            "headers": {"x-ratelimit": response.headers.get("x-ratelimit", "")},
            "data": _parse_body(response.text),
        }

    async def _post(self, path: str, payload: Dict[str, Any], label: str) -> Any:
        response = await self._http.post(
            f"{self._base_url}{path}", json=payload, headers=self._headers()
        )
        if not response.is_success:
            raise TraktError(
                f"Trakt {label} error {response.status_code}: {response.text}",
                status=response.status_code,
                body=response.text,
            )
        return _parse_body(response.text) or {"ok": True}

    async def fetch_history(self, limit: Any = DEFAULT_HISTORY_LIMIT) -> List[Dict[str, Any]]:
        """Most recent watched movies, newest first."""
        self._ensure_configured()
        safe_limit = clamp_history_limit(limit)
        response = await self._http.get(
            f"{self._base_url}/sync/history/movies",
            params={"limit": safe_limit},
            headers=self._headers(),
        )
        if not response.is_success:
            raise TraktError(
                f"Trakt history error {response.status_code}: {response.text}",
                status=response.status_code,
                body=response.text,
            )
        data = _parse_body(response.text)
        return data if isinstance(data, list) else []

    async def add_to_history(self, ids: Dict[str, Any]) -> Any:
        self._ensure_configured()
        return await self._post("/sync/history", {"movies": [{"ids": ids}]}, "add-to-history")

    async def modify_watchlist(self, action: str, ids: Dict[str, Any]) -> Any:
        if action not in WATCHLIST_ACTIONS:
            raise ValidationError(f"action must be one of {list(WATCHLIST_ACTIONS)}, got '{action}'")
        self._ensure_configured()
        path = "/sync/watchlist" if action == "add" else "/sync/watchlist/remove"
        return await self._post(path, {"movies": [{"ids": ids}]}, f"watchlist {action}")
