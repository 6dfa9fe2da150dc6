"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST FLOW                                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer.accept()                                             │
    │          │  Connection                                              │
    │          ▼                                                           │
    │   WebServer._dispatch(conn)                                         │
    │          │                                                           │
    │          ├── concurrent ──► ThreadPool.submit(handler.handle, conn) │
    │          │                                                           │
    │          └── sequential ──► handler.handle(conn)   (inline)         │
    │                                                                      │
    │   RequestHandler.handle(conn)                                       │
    │          └── read line → resolve → 200 / 404 / 501 → close          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .handlers import RequestHandler


logger = logging.getLogger(__name__)


class WebServer:
    """
    Static file web server.

    Usage:
        config = ServerConfig(root_dir="./www", host="127.0.0.1", port=8080)
        WebServer(config).run()   # Blocks

    Raises (from the constructor):
        ConfigError: If config does not validate.
    """

    def __init__(self, config: ServerConfig):
        config.validate()
        self.config = config

        self._handler = RequestHandler(config)
        self._socket_server = SocketServer(config)
        self._thread_pool: Optional[ThreadPool] = None
        if config.concurrent:
            self._thread_pool = ThreadPool(
                min_workers=config.min_workers,
                max_workers=config.max_workers,
            )

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def run(self):
        """
        Bind and serve until shutdown() or Ctrl+C.

        Raises:
            BindError: If the address is invalid or cannot be bound.
        """
        # Bind first: a bind failure must not leave worker threads behind
        self._socket_server.bind()

        if self._thread_pool is not None:
            self._thread_pool.start()

        mode = (
            f"{self.config.min_workers}-{self.config.max_workers} worker threads"
            if self._thread_pool is not None else "sequential"
        )
        logger.info(f"Serving {self.config.root_dir} ({mode})")

        try:
            self._socket_server.start(self._dispatch)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            if self._thread_pool is not None:
                self._thread_pool.shutdown(wait=True, timeout=30.0)
            logger.info("Server stopped")

    def _dispatch(self, conn: Connection):
        if self._thread_pool is None:
            self._handler.handle(conn)
            return

        # Backpressure: wait for a queue slot at most as long as a client may idle
        if not self._thread_pool.submit(
            self._handler.handle, args=(conn,), queue_timeout=self.config.timeout
        ):
            stats = self._thread_pool.stats
            logger.warning(
                f"[{conn.id}] Worker queue full, dropping connection from {conn.client_ip} "
                f"({stats['workers']['busy']} busy workers, {stats['tasks']['queued']} queued)"
            )
            conn.close()

    def shutdown(self):
        """Stop accepting connections; run() returns once workers finish."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)
