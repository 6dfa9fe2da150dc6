"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

The server needs exactly three things to run:

    root_dir    Directory that holds the servable files (document root)
    host        IP literal to bind to (e.g. 127.0.0.1, 0.0.0.0, ::1)
    port        TCP port, 1-65535

Everything else has a default and only tunes behaviour.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── myownwebserver -root=./www -ip=127.0.0.1 -port=8080       │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBSERVER_PORT=8080 myownwebserver -root=./www ...        │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
IMMUTABILITY
=============================================================================

The config is created once at startup and then read by every connection
handler, possibly from many worker threads at once. It is a frozen
dataclass: nothing can write to it after construction, so no locking is
needed anywhere it is read.

=============================================================================
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ConfigError


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    REQUIRED
    - root_dir, host, port

    NETWORK SETTINGS
    - backlog, buffer_size, max_request_line, timeout

    CONCURRENCY
    - concurrent, min_workers, max_workers

    FILE SERVING
    - index_file, confine_to_root

    LOGGING
    - log_file, log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUIRED
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str
    """Document root. Stored as an absolute, normalised path."""

    host: str = "127.0.0.1"
    """IP literal to bind to. IPv4 and IPv6 are both accepted."""

    port: int = 8080
    """TCP port to listen on (1-65535)."""

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    max_request_line: int = 8192
    """Longest request line accepted before the connection is dropped."""

    timeout: Optional[float] = 30.0
    """
    Per-operation socket timeout for client connections, in seconds.
    None blocks forever, which lets one silent client hold a worker.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    concurrent: bool = True
    """
    Dispatch each connection to the thread pool.
    False handles connections one at a time inside the accept loop.
    """

    min_workers: int = 4
    max_workers: int = 16

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    index_file: str = "index.html"
    """Document served for a request to "/"."""

    confine_to_root: bool = True
    """
    Refuse (with 404) any resolved path that escapes root_dir through
    ".." segments. False serves whatever the joined path points at.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_file: Optional[str] = "myOwnWebServer.log"
    """Append-only log sink. None disables the file sink."""

    log_level: str = "INFO"

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__
        if self.root_dir:
            object.__setattr__(self, "root_dir", os.path.abspath(self.root_dir))

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBSERVER_ROOT       Document root (required)
        WEBSERVER_IP         Bind address (default: 127.0.0.1)
        WEBSERVER_PORT       Bind port (default: 8080)
        WEBSERVER_WORKERS    Max worker threads (default: 16)
        WEBSERVER_TIMEOUT    Client socket timeout in seconds (default: 30)
        WEBSERVER_LOG_FILE   Log sink path (default: myOwnWebServer.log)
        WEBSERVER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================

        Keyword arguments override the environment.

        Raises:
            ConfigError: If a numeric variable does not parse.
        """
        try:
            values = dict(
                root_dir=os.getenv("WEBSERVER_ROOT", ""),
                host=os.getenv("WEBSERVER_IP", "127.0.0.1"),
                port=int(os.getenv("WEBSERVER_PORT", "8080")),
                max_workers=int(os.getenv("WEBSERVER_WORKERS", "16")),
                timeout=float(os.getenv("WEBSERVER_TIMEOUT", "30")),
                log_file=os.getenv("WEBSERVER_LOG_FILE", "myOwnWebServer.log"),
                log_level=os.getenv("WEBSERVER_LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

        values.update(overrides)
        values.setdefault("min_workers", min(cls.min_workers, values["max_workers"]))
        return cls(**values)

    def with_overrides(self, **changes) -> "ServerConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the process before the
        socket is ever opened.

        Raises:
            ConfigError: Describing the first invalid value found.
        """
        if not self.root_dir:
            raise ConfigError("A root directory is required.")

        if not os.path.isdir(self.root_dir):
            raise ConfigError(f"Root directory does not exist: {self.root_dir}")

        if not self.host:
            raise ConfigError("A bind address is required.")

        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.backlog < 1:
            raise ConfigError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ConfigError("buffer_size must be >= 1024")

        if self.max_request_line < 16:
            raise ConfigError("max_request_line must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be > 0")

        if self.min_workers < 1:
            raise ConfigError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ConfigError("max_workers must be >= min_workers")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Frozen dataclass: shared read-only by every worker thread
# 2. Environment variable support (from_env)
# 3. Fail-fast validation with ConfigError
# =============================================================================
