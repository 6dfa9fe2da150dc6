"""
=============================================================================
TCP SOCKET SERVER (CONNECTION ACCEPTOR)
=============================================================================

Binds the listening socket and runs the accept loop. Every accepted client
socket is wrapped in a Connection and handed to a callback; what happens to
it after that (inline handling or a worker thread) is the caller's choice.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create the listening socket (AF_INET or AF_INET6,
                   picked from the bind address literal)
    2. bind()      Reserve IP:PORT          ─┐
    3. listen()    Start the accept queue   ─┴─ failures here → BindError
    4. accept()    Wait for a client, get a NEW socket for it
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘     Never sends/receives data
                                │ accept()
              ┌─────────────────┼─────────────────┐
              ▼                 ▼                 ▼
        ┌──────────┐      ┌──────────┐      ┌──────────┐
        │ Client 1 │      │ Client 2 │      │ Client 3 │   one socket per
        └──────────┘      └──────────┘      └──────────┘   connection

=============================================================================
THE ACCEPT LOOP NEVER ENDS ON ITS OWN
=============================================================================

In normal operation the loop runs until the process is killed. shutdown()
exists for tests and for code embedding the server: accept() polls with a
one-second timeout so the loop notices the flag.

=============================================================================
"""

import ipaddress
import socket
import logging
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from ..errors import BindError
from .connection import Connection


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("myownwebserver.access")

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Accepts TCP connections and passes them on.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()
        self._stopped = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port); the configured one before binding."""
        if self._socket is not None:
            sockname = self._socket.getsockname()
            return (sockname[0], sockname[1])
        return (self.config.host, self.config.port)

    def _address_family(self) -> socket.AddressFamily:
        """
        Pick the socket family from the bind address.

        Raises:
            BindError: If host is not an IP literal.
        """
        try:
            ip = ipaddress.ip_address(self.config.host)
        except ValueError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise BindError(self.config.host, self.config.port, f"invalid IP address ({e})") from e
        return socket.AF_INET6 if ip.version == 6 else socket.AF_INET

    def _create_socket(self, family: socket.AddressFamily) -> socket.socket:
        sock = socket.socket(family, socket.SOCK_STREAM)

        # SO_REUSEADDR lets a restarted server bind while old sockets sit in
        # TIME_WAIT. It does NOT allow two live listeners on one port.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def bind(self):
        """
        Create, bind and listen.

        Raises:
            BindError: Invalid address, address in use, permission denied.
        """
        family = self._address_family()
        sock = self._create_socket(family)
        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise BindError(self.config.host, self.config.port, e.strerror or str(e)) from e

        self._socket = sock

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind (if not yet bound) and run the accept loop.

        Blocks until shutdown() is called.

        Args:
            connection_handler: Called once per accepted connection.

        Raises:
            BindError: If the listening socket cannot be set up.
        """
        if self._socket is None:
            self.bind()

        self._running = True
        self._stopped.clear()
        host, port = self.address
        access_logger.info(f"WebServer running at {host}:{port}...")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Poll: re-check _running
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_line_length=self.config.max_request_line,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop the accept loop. Idempotent."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
        self._running = False
        self._ready.clear()
        self._stopped.set()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop is running. Returns False on timeout."""
        return self._ready.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the accept loop has exited. Returns False on timeout."""
        return self._stopped.wait(timeout)
