"""Handler registry for tools.

Merges HANDLERS and VALIDATORS from all sub-modules into unified dicts.
"""

from typing import Callable, Dict

from cinemem.mcp.handlers.backend import HANDLERS as _BACKEND_H
from cinemem.mcp.handlers.backend import VALIDATORS as _BACKEND_V
from cinemem.mcp.handlers.memory import HANDLERS as _MEMORY_H
from cinemem.mcp.handlers.memory import VALIDATORS as _MEMORY_V
from cinemem.mcp.handlers.trakt import HANDLERS as _TRAKT_H
from cinemem.mcp.handlers.trakt import VALIDATORS as _TRAKT_V

HANDLERS: Dict[str, Callable] = {
    **_TRAKT_H,
    **_MEMORY_H,
    **_BACKEND_H,
}

VALIDATORS: Dict[str, Callable] = {
    **_TRAKT_V,
    **_MEMORY_V,
    **_BACKEND_V,
}
