"""cinemem Backend API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cinemem.config import get_settings

from .dependencies import AppServices, close_services
from .logging_config import configure_logging, get_logger
from .rate_limit import limiter
from .responses import validation_exception_handler
from .routes import agent_router, memories_router, movies_router, watchlist_router

logger = get_logger("cinemem.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        f"Starting cinemem backend (vector_store={settings.vector_store_id}, "
        f"trakt_configured={settings.trakt_configured}, debug={settings.debug})"
    )
    yield
    # Shutdown
    await close_services()
    logger.info("Shutting down cinemem backend")


app = FastAPI(
    title="cinemem Backend API",
    description="Movie memory: vector store records mirrored to Trakt",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Malformed request bodies are client errors (400), not 422
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(movies_router)
app.include_router(watchlist_router)
app.include_router(memories_router)
app.include_router(agent_router)


@app.get("/")
async def root():
    """Service info."""
    current = get_settings()
    return {
        "ok": True,
        "service": "cinemem-backend",
        "version": "0.1.0",
        "vectorStoreId": current.vector_store_id,
        "traktConfigured": current.trakt_configured,
        "endpoints": {
            "POST /mark-seen": "Mark a movie as seen: writes to memory and optionally Trakt history.",
            "POST /import-trakt-history": "Import Trakt movie history into memory.",
            "POST /trakt/watchlist/add": "Add to the Trakt watchlist, optionally recording it in memory.",
            "POST /trakt/watchlist/remove": "Remove from the Trakt watchlist, optionally recording it in memory.",
            "POST /memory/search": "Case-insensitive substring search over memory.",
            "POST /agent/chat": "Talk to the movie agent.",
        },
    }


@app.get("/health")
async def health(services: AppServices):
    """Health check with an actual vector store round trip."""
    store_status = "disconnected"
    try:
        await services.memory.store.list_files(limit=1)
        store_status = "connected"
    except Exception as e:
        store_status = f"error: {str(e)[:50]}"

    overall_status = "healthy" if store_status == "connected" else "degraded"

    return {
        "status": overall_status,
        "vector_store": store_status,
        "trakt": "configured" if services.memory.trakt.configured else "not_configured",
    }
