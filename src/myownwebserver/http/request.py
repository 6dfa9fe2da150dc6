"""
=============================================================================
HTTP REQUEST LINE
=============================================================================

The server only ever looks at the first line of a request:

    GET /images/logo.png HTTP/1.1\r\n        ← request line (parsed)
    Host: localhost:8080\r\n                  ← headers (never read)
    \r\n

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST LINE ANATOMY                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │     GET      /images/logo.png      HTTP/1.1                         │
    │      │              │                  │                             │
    │   method         target             version                          │
    │                                                                      │
    │   Tokens are separated by SINGLE spaces. "GET  /" (two spaces)      │
    │   yields an empty target token, exactly as the wire says.           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A line with fewer than two tokens cannot name a method AND a target, so it
does not produce a Request at all.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


SUPPORTED_METHOD = "GET"


@dataclass(frozen=True)
class Request:
    """
    One parsed request line.

    Attributes:
        method: First token, compared case-sensitively ("get" is not GET).
        target: Second token, the raw URL path as sent.

    Any further tokens (the protocol version) are ignored.
    """

    method: str
    target: str

    @property
    def is_supported(self) -> bool:
        return self.method == SUPPORTED_METHOD


def parse_request_line(line: str) -> Optional[Request]:
    """
    Split a request line into a Request.

    Args:
        line: Request line, with or without a trailing CRLF/LF.

    Returns:
        The Request, or None when the line has fewer than two tokens.

    Examples:
        >>> parse_request_line("GET /index.html HTTP/1.1")
        Request(method='GET', target='/index.html')

        >>> parse_request_line("GET") is None
        True
    """
    line = line.rstrip("\r\n")
    parts = line.split(" ")
    if len(parts) < 2:
        return None

    return Request(method=parts[0], target=parts[1])
