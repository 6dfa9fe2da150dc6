"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the small API the request handler
needs: read the request line, send the response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP does not preserve message boundaries. A client that sends

    GET /index.html HTTP/1.1\r\n

may arrive as "GET /ind" followed by "ex.html HTTP/1.1\r\n", or together
with the headers that follow it. The only way to know the request line is
complete is to buffer until the LF shows up:

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request_line()                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   while b"\n" not in buffer:                                     │
    │       chunk = recv()                                             │
    │       if not chunk:  ──────────► peer closed: return None       │
    │       buffer += chunk                                            │
    │       if too long:   ──────────► TransportError                 │
    │                                                                  │
    │   line = buffer up to LF, minus the optional CR                  │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Anything after the request line (headers, a body) stays unread and is
drained on close.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ACCEPTED ──► READING ──► PROCESSING ──► WRITING ──► CLOSED
        │           │             │             │          ▲
        └───────────┴─────────────┴─────────────┴──────────┘
                        (any failure closes)

Exactly one request is served per connection. There is no keep-alive.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..errors import TransportError


logger = logging.getLogger(__name__)

# Upper bound on the whole unread-data drain in close()
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close bookkeeping."""

    ACCEPTED = "accepted"      # Just accepted, nothing read yet
    READING = "reading"        # Waiting for the request line
    PROCESSING = "processing"  # Line read, deciding the response
    WRITING = "writing"        # Sending response bytes
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's address tuple, (ip, port) for IPv4.
        id: Short unique identifier for log correlation.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Bytes requested per recv() call.
        timeout: Per-operation socket timeout; None blocks forever.
        max_line_length: Longest request line accepted.
    """

    socket: socket.socket
    address: tuple
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_line_length: int = 8192

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        # settimeout(None) means blocking, which is what we want for None
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else "-"

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request_line(self) -> Optional[str]:
        """
        Read one line terminated by LF (optionally CRLF).

        Returns:
            The line without its terminator, decoded as UTF-8 (invalid bytes
            replaced). None if the peer closed before a full line arrived.

        Raises:
            TransportError: On socket errors, timeouts, or a line longer
                            than max_line_length.
        """
        self.state = ConnectionState.READING

        while b"\n" not in self._buffer:
            chunk = self._recv()
            if not chunk:
                if self._buffer:
                    logger.debug(f"[{self.id}] Peer closed mid-line after {len(self._buffer)} bytes")
                return None

            self._buffer += chunk
            if len(self._buffer) > self.max_line_length and b"\n" not in self._buffer:
                raise TransportError(f"Request line too long: more than {self.max_line_length} bytes")

        line, _, self._buffer = self._buffer.partition(b"\n")
        if len(line) > self.max_line_length:
            raise TransportError(f"Request line too long: {len(line)} bytes")

        self.state = ConnectionState.PROCESSING
        return line.rstrip(b"\r").decode("utf-8", errors="replace")

    def _recv(self) -> bytes:
        """
        Receive one chunk.

        Returns empty bytes when the peer has closed in an orderly way.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except ConnectionResetError as e:
            raise TransportError("Connection reset by peer") from e
        except socket.timeout as e:
            raise TransportError("Timed out waiting for the request line") from e
        except OSError as e:
            raise TransportError(f"Receive failed: {e}") from e

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_all(self, data: bytes) -> None:
        """
        Send every byte of data.

        sendall() keeps calling send() until the whole buffer is out.

        Raises:
            TransportError: If the peer went away or the send timed out.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise TransportError(f"Send failed: {e}") from e

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN: the client sees end-of-response.
        2. Drain whatever the client sent that we never read (headers),
           for at most DRAIN_TIMEOUT seconds in total.
           Closing with unread data makes the kernel send RST, which can
           destroy the response before the client reads it.
        3. close() releases the file descriptor.

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(4096):
                    break
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
