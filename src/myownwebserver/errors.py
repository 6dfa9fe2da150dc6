"""
=============================================================================
SERVER ERRORS
=============================================================================

Exception hierarchy for the web server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ERROR KINDS                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   WebServerError                                                    │
    │   ├── ConfigError      startup, fatal (exit 1)                      │
    │   ├── BindError        startup, fatal (exit 1)                      │
    │   └── TransportError   per connection, logged, connection closed    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Unsupported methods and missing files are NOT exceptions. The request
handler returns them as outcome values (see handlers/static.py) and turns
them into 501 and 404 responses.

=============================================================================
"""


class WebServerError(Exception):
    """Base class for all server errors."""


class ConfigError(WebServerError, ValueError):
    """Invalid server configuration (bad port, missing root directory, ...)."""


class BindError(WebServerError):
    """
    The listening socket could not be created.

    Raised when the bind address is not an IP literal, or when bind()/listen()
    fail (address already in use, permission denied).
    """

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to bind to {host}:{port}: {reason}")


class TransportError(WebServerError):
    """Socket I/O failed while reading a request or writing a response."""
