"""
=============================================================================
MYOWNWEBSERVER - Static File HTTP/1.1 Server Built From Sockets
=============================================================================

A small web server that answers GET requests with files from a document
root. One request per connection, plain sockets, no framework.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    myownwebserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m myownwebserver)
    ├── server.py            # WebServer: wires everything together
    ├── config.py            # ServerConfig frozen dataclass
    ├── errors.py            # ConfigError, BindError, TransportError
    ├── logsink.py           # Append-only log file + console logging
    ├── core/
    │   ├── socket_server.py # Bind, listen, accept loop
    │   ├── connection.py    # Client socket wrapper
    │   └── thread_pool.py   # Worker threads
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response framing
    │   ├── status_codes.py  # HTTPStatus enum
    │   └── mime_types.py    # MIME type detection
    └── handlers/
        ├── static.py        # RequestHandler
        └── paths.py         # URL → filesystem path

=============================================================================
QUICK START
=============================================================================

    From the shell:

        myownwebserver -root=./www -ip=127.0.0.1 -port=8080

    From code:

        from myownwebserver import WebServer, ServerConfig

        WebServer(ServerConfig(root_dir="./www", port=8080)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig
from .errors import WebServerError, ConfigError, BindError, TransportError

__all__ = [
    "WebServer",
    "ServerConfig",
    "WebServerError",
    "ConfigError",
    "BindError",
    "TransportError",
    "__version__",
]
