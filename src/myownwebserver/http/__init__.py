"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    http/
    ├── request.py       # Request line parsing
    ├── response.py      # Response framing and writing
    ├── status_codes.py  # HTTPStatus enum
    └── mime_types.py    # Extension → MIME type

=============================================================================
"""

from .request import Request, parse_request_line, SUPPORTED_METHOD
from .response import (
    HTTPResponse,
    file_response,
    error_response,
    write_success,
    write_error,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, MIME_TYPES, DEFAULT_MIME_TYPE

__all__ = [
    "Request",
    "parse_request_line",
    "SUPPORTED_METHOD",
    "HTTPResponse",
    "file_response",
    "error_response",
    "write_success",
    "write_error",
    "HTTPStatus",
    "get_mime_type",
    "MIME_TYPES",
    "DEFAULT_MIME_TYPE",
]
