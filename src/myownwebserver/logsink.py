"""
=============================================================================
LOG SINK
=============================================================================

Logging setup for the web server.

Every module logs through the standard library: a module-level
``logging.getLogger(__name__)``, all under the ``myownwebserver`` namespace.
Request events (request received, file served, response sent, errors) use
the ``myownwebserver.access`` logger.

This module attaches the handlers, once per process:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HANDLERS                                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FILE SINK (append-only)                                           │
    │   2026-10-19 14:03:12 Request received: GET / HTTP/1.1              │
    │   2026-10-19 14:03:12 File served: /srv/www/index.html (...)        │
    │                                                                      │
    │   CONSOLE                                                           │
    │   2026-10-19 14:03:12 [INFO] myownwebserver.access: Request ...     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing here runs on import. Library users and tests that never call
configure_logging() get no files written; their records simply propagate
to whatever the root logger is configured to do.

=============================================================================
"""

import logging
import sys

from .config import ServerConfig

PACKAGE_LOGGER = "myownwebserver"
ACCESS_LOGGER = "myownwebserver.access"

SINK_FORMAT = "%(asctime)s %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed by configure_logging()
_HANDLER_TAG = "_myownwebserver_sink"


def configure_logging(config: ServerConfig, console: bool = True) -> logging.Logger:
    """
    Install the file sink and console handler on the package logger.

    Calling it again replaces the handlers it installed before, so there is
    never more than one sink per process.

    Args:
        config: Supplies log_file and log_level.
        console: Also log to stderr.

    Returns:
        The package logger.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    if config.log_file:
        # mode="a": the sink is append-only across restarts
        file_handler = logging.FileHandler(config.log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(SINK_FORMAT, datefmt=DATE_FORMAT))
        setattr(file_handler, _HANDLER_TAG, True)
        logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        setattr(stream_handler, _HANDLER_TAG, True)
        logger.addHandler(stream_handler)

    # Handlers above already emit everything; don't duplicate via root
    logger.propagate = False
    return logger
