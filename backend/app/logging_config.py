"""Logging setup for the backend."""

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_FORMAT)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


_write_logger = get_logger("cinemem.writes")


def log_memory_write(
    route: str,
    file_id: str | None,
    success: bool = True,
    error: str | None = None,
) -> None:
    """One line per memory write, for auditing what reached the store."""
    if success:
        _write_logger.info(f"WRITE | {route} | file={file_id or '-'} | ok")
    else:
        _write_logger.warning(f"WRITE | {route} | file={file_id or '-'} | failed: {error}")
