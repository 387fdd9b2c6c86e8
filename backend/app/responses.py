"""Uniform JSON error bodies for route handlers.

400 for validation failures, 500 for everything else.
"""

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from .logging_config import get_logger

logger = get_logger("cinemem.api")


def client_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": message},
    )


def internal_error(
    exc: Exception, route: str, *, error: str = "internal_error"
) -> JSONResponse:
    logger.error(f"{route} error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": error, "details": str(exc)},
    )


def describe_validation_error(exc: RequestValidationError) -> str:
    """Turn the first pydantic error into a short message."""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    name = ".".join(loc) or "request body"
    if first.get("type") == "missing":
        return f"{name} is required"
    return f"{name}: {first.get('msg', 'invalid value')}"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies as 400 before any route code runs."""
    message = describe_validation_error(exc)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return client_error(message)
