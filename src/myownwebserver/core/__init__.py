"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

Low-level networking: everything below the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer    bind, listen, accept loop                          │
    └───────────────────────────────┬─────────────────────────────────────┘
                                    ▼ Connection per client
    ┌─────────────────────────────────────────────────────────────────────┐
    │  ThreadPool      runs the handler for each connection on a worker   │
    └───────────────────────────────┬─────────────────────────────────────┘
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  Connection      read request line, send bytes, graceful close      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
