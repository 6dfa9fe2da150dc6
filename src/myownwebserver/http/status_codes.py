"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

Status codes the server can put on the wire, with their reason phrases.

    ┌────────────────────────────────────────────────────────────────────┐
    │                      STATUS CODES IN USE                           │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  200   │ OK               - File found, body is the file           │
    │  404   │ Not Found        - No regular file at the resolved path   │
    │  501   │ Not Implemented  - Anything other than GET                │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes compare equal to integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_IMPLEMENTED.phrase
        'Not Implemented'
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    NOT_FOUND = 404

    # 5xx SERVER ERRORS
    NOT_IMPLEMENTED = 501

    @property
    def phrase(self) -> str:
        """The reason phrase used in the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
