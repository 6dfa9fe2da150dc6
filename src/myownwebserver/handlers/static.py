"""
=============================================================================
STATIC FILE REQUEST HANDLER
=============================================================================

Handles one connection from first byte to close:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    handle(conn)                                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read request line ──── none / empty ──────────────► close         │
    │          │                                                           │
    │          ▼                                                           │
    │   dispatch(line) ─────► MethodRejected ──► 501 Not Implemented      │
    │          │                                                           │
    │          ├──────────► NotFound ──────────► 404 Not Found            │
    │          │                                                           │
    │          └──────────► Served ────────────► 200 OK + file bytes      │
    │                                                                      │
    │   any exception ─────► log "Error processing request: ..." ─► close │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
OUTCOMES, NOT EXCEPTIONS
=============================================================================

"Wrong method" and "no such file" are ordinary answers, not failures.
dispatch() returns one of three outcome values and handle() branches on
its type. Exceptions are left for things that really went wrong: a socket
error, an unreadable file.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Union

from ..config import ServerConfig
from ..core.connection import Connection
from ..http.request import parse_request_line
from ..http.response import write_success, write_error
from ..http.status_codes import HTTPStatus
from ..http.mime_types import get_mime_type
from .paths import resolve_path, is_within_root


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("myownwebserver.access")

NOT_IMPLEMENTED_MESSAGE = "At the present this server only processes HTTP GET requests."
NOT_FOUND_MESSAGE = "The requested resource was not found."


# =============================================================================
# OUTCOMES
# =============================================================================

@dataclass(frozen=True)
class MethodRejected:
    """The request line is not a GET with a target."""

    method: str = ""


@dataclass(frozen=True)
class NotFound:
    """No regular file (inside the root, when confined) at the path."""

    path: str


@dataclass(frozen=True)
class Served:
    """A file to send back."""

    path: str
    content_type: str
    body: bytes


Outcome = Union[MethodRejected, NotFound, Served]


class RequestHandler:
    """
    Serves files from the configured document root.

    One instance is shared by every worker thread; it holds nothing but the
    read-only config.

    Usage:
        handler = RequestHandler(config)
        socket_server.start(handler.handle)
    """

    def __init__(self, config: ServerConfig):
        self.config = config

    def dispatch(self, line: str) -> Outcome:
        """
        Decide the response for a request line.

        Reads the target file when there is one to serve.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        request = parse_request_line(line)
        if request is None or not request.is_supported:
            return MethodRejected(request.method if request else line)

        path = resolve_path(request.target, self.config.root_dir, self.config.index_file)

        if self.config.confine_to_root and not is_within_root(path, self.config.root_dir):
            logger.warning(f"Path escapes document root: {request.target}")
            return NotFound(path)

        if not os.path.isfile(path):
            return NotFound(path)

        with open(path, "rb") as f:
            body = f.read()

        return Served(path=path, content_type=get_mime_type(path), body=body)

    def handle(self, conn: Connection) -> None:
        """
        Serve exactly one request on conn, then close it.

        Never raises: every failure is logged and ends the connection.
        """
        with conn:
            try:
                line = conn.read_request_line()
                if not line:
                    logger.debug(f"[{conn.id}] No request line received from {conn.client_ip}")
                    return

                access_logger.info(f"Request received: {line}")

                outcome = self.dispatch(line)
                self._respond(conn, outcome)

            except Exception as e:
                access_logger.error(f"Error processing request: {e}")

    def _respond(self, conn: Connection, outcome: Outcome) -> None:
        if isinstance(outcome, Served):
            write_success(conn, outcome.content_type, outcome.body)
            access_logger.info(
                f"File served: {outcome.path} ({len(outcome.body)} bytes, {outcome.content_type})"
            )
        elif isinstance(outcome, NotFound):
            write_error(conn, HTTPStatus.NOT_FOUND, NOT_FOUND_MESSAGE)
        else:
            write_error(conn, HTTPStatus.NOT_IMPLEMENTED, NOT_IMPLEMENTED_MESSAGE)
