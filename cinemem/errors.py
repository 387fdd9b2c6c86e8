"""Error taxonomy for cinemem.

Routes and tool handlers map these onto client errors (validation) and
internal errors (configuration, upstream vendors).
"""

from typing import Optional


class CinememError(Exception):
    """Base for all cinemem errors."""

    pass


class ConfigurationError(CinememError):
    """A required credential or identifier is missing."""

    pass


class ValidationError(CinememError, ValueError):
    """Caller input is malformed. No side effect has been performed."""

    pass


class UpstreamError(CinememError):
    """An external service answered with a non-success status or failed."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class StoreError(UpstreamError):
    """The file storage / vector store vendor rejected an operation."""

    pass


class TraktError(UpstreamError):
    """The Trakt API rejected a request."""

    pass
