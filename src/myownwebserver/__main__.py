"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

    # The three required settings
    myownwebserver -root=./www -ip=127.0.0.1 -port=8080

    # Same thing, GNU style
    python -m myownwebserver --root ./www --ip 127.0.0.1 --port 8080

    # One connection at a time, inside the accept loop
    myownwebserver -root=./www -ip=0.0.0.0 -port=80 --sequential

Any of the three may come from the environment instead
(WEBSERVER_ROOT, WEBSERVER_IP, WEBSERVER_PORT).

=============================================================================
EXIT STATUS
=============================================================================

    0   Server stopped normally (Ctrl+C)
    1   Invalid configuration, or the address could not be bound
    2   Bad command line (argparse usage error)

=============================================================================
"""

import argparse
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig
from .errors import BindError, ConfigError
from .logsink import configure_logging
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Single-dash long options (-root=DIR) are the documented syntax;
    argparse accepts "-opt=value" for them just like "--opt=value".
    """
    parser = argparse.ArgumentParser(
        prog="myownwebserver",
        description="Serve static files from a document root over HTTP/1.1",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  myownwebserver -root=./www -ip=127.0.0.1 -port=8080
  myownwebserver --root ./www --ip 0.0.0.0 --port 8080 --workers 8
  myownwebserver -root=./www -ip=127.0.0.1 -port=8080 --sequential
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUIRED SETTINGS (environment fallback)
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "-root", "--root",
        help="Document root directory (env: WEBSERVER_ROOT)",
    )

    parser.add_argument(
        "-ip", "--ip",
        help="IP address to bind to (env: WEBSERVER_IP)",
    )

    parser.add_argument(
        "-port", "--port",
        type=int,
        help="Port to listen on, 1-65535 (env: WEBSERVER_PORT)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Handle one connection at a time inside the accept loop",
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Maximum worker threads (env: WEBSERVER_WORKERS, default: 16)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Client socket timeout in seconds (env: WEBSERVER_TIMEOUT, default: 30)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--allow-traversal",
        action="store_true",
        help="Serve paths that escape the root through '..' (unsafe)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-file",
        help="Append-only log file, empty to disable (env: WEBSERVER_LOG_FILE, default: myOwnWebServer.log)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (env: WEBSERVER_LOG_LEVEL, default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"MyOwnWebServer {__version__}",
    )

    return parser


# (flag, argparse dest, environment variable) for the settings main() insists on
REQUIRED_SETTINGS = (
    ("-root", "root", "WEBSERVER_ROOT"),
    ("-ip", "ip", "WEBSERVER_IP"),
    ("-port", "port", "WEBSERVER_PORT"),
)


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Translate parsed arguments into a ServerConfig (not yet validated).

    Options given on the command line override the environment; everything
    else comes from ServerConfig.from_env().

    Raises:
        ConfigError: If an environment variable does not parse.
    """
    given = {
        "root_dir": args.root,
        "host": args.ip,
        "port": args.port,
        "max_workers": args.workers,
        "timeout": args.timeout,
        "log_file": args.log_file,
        "log_level": args.log_level,
    }
    overrides = {name: value for name, value in given.items() if value is not None}

    if args.sequential:
        overrides["concurrent"] = False
    if args.allow_traversal:
        overrides["confine_to_root"] = False

    config = ServerConfig.from_env(**overrides)
    if not config.log_file:
        config = config.with_overrides(log_file=None)
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Process exit status.
    """
    print("Starting WebServer ...")

    parser = build_parser()
    args = parser.parse_args(argv)

    missing = [
        flag for flag, attr, env in REQUIRED_SETTINGS
        if getattr(args, attr) in (None, "") and not os.getenv(env)
    ]
    if missing:
        parser.error(f"missing required settings: {', '.join(missing)}")

    try:
        server = WebServer(config_from_args(args))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(server.config)

    try:
        server.run()
    except BindError:
        # SocketServer already logged the reason
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
