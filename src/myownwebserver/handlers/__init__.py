"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    handlers/
    ├── static.py   # RequestHandler: one connection → one file or error
    └── paths.py    # URL target → filesystem path, root containment

=============================================================================
"""

from .static import (
    RequestHandler,
    MethodRejected,
    NotFound,
    Served,
    Outcome,
    NOT_FOUND_MESSAGE,
    NOT_IMPLEMENTED_MESSAGE,
)
from .paths import resolve_path, is_within_root, DEFAULT_DOCUMENT

__all__ = [
    "RequestHandler",
    "MethodRejected",
    "NotFound",
    "Served",
    "Outcome",
    "NOT_FOUND_MESSAGE",
    "NOT_IMPLEMENTED_MESSAGE",
    "resolve_path",
    "is_within_root",
    "DEFAULT_DOCUMENT",
]
