"""
=============================================================================
HTTP RESPONSE FRAMING
=============================================================================

Builds the bytes of an HTTP/1.1 response and writes them onto a sink.

=============================================================================
HTTP RESPONSE STRUCTURE
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │                    HTTP RESPONSE                                   │
    ├────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    HTTP/1.1 200 OK\r\n                  ← Status line               │
    │    Content-Type: text/html\r\n          ← Headers (exactly two)     │
    │    Content-Length: 1024\r\n                                         │
    │    \r\n                                 ← Blank line                │
    │    <!DOCTYPE html>...                   ← Body (Content-Length B)   │
    │                                                                     │
    └────────────────────────────────────────────────────────────────────┘

The server sends exactly those two headers. There is no Date, Server or
Connection header: every connection carries one response and is then
closed, so the client learns the body has ended from Content-Length (or
from the close).

Line endings are always CRLF, whatever platform the server runs on.

=============================================================================
SINKS
=============================================================================

A sink is anything with a ``send_all(data: bytes)`` method. In the server
it is a core.connection.Connection; tests can pass any small object that
collects bytes.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from .status_codes import HTTPStatus


logger = logging.getLogger("myownwebserver.access")

CRLF = "\r\n"
HTTP_VERSION = "HTTP/1.1"
ERROR_CONTENT_TYPE = "text/plain"


class ResponseSink(Protocol):
    """Anything a response can be written to."""

    def send_all(self, data: bytes) -> None:
        ...


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be sent.

    Attributes:
        status: Status code (its reason phrase comes from the enum).
        content_type: Value of the Content-Type header.
        body: Raw body bytes.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = ERROR_CONTENT_TYPE
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{HTTP_VERSION} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def to_bytes(self) -> bytes:
        """
        Serialize to the wire format.

        The header block is ASCII; the body is appended untouched.
        """
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {self.content_length}",
        ]
        head = CRLF.join(lines) + CRLF + CRLF
        return head.encode("ascii") + self.body


def file_response(content_type: str, body: bytes) -> HTTPResponse:
    """A 200 OK response carrying file contents."""
    return HTTPResponse(status=HTTPStatus.OK, content_type=content_type, body=body)


def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """
    A plain-text error response.

    The messages the server sends are ASCII, so the UTF-8 byte length used
    for Content-Length equals the message's character length.
    """
    return HTTPResponse(
        status=status,
        content_type=ERROR_CONTENT_TYPE,
        body=message.encode("utf-8"),
    )


def write_success(sink: ResponseSink, content_type: str, body: bytes) -> None:
    """
    Send a 200 OK response with the given body.

    Raises:
        TransportError: Propagated from the sink if sending fails.
    """
    sink.send_all(file_response(content_type, body).to_bytes())


def write_error(sink: ResponseSink, status: HTTPStatus, message: str) -> None:
    """
    Send a plain-text error response and log it.

    Logged as "Response sent: <code> <reason>" once the bytes are out.

    Raises:
        TransportError: Propagated from the sink if sending fails.
    """
    sink.send_all(error_response(status, message).to_bytes())
    logger.info(f"Response sent: {int(status)} {status.phrase}")
