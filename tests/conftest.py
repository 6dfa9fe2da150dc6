"""
pytest configuration and fixtures.
"""

import logging
import socket
import threading
from pathlib import Path
from typing import Callable, Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from myownwebserver import WebServer, ServerConfig
from myownwebserver.core import Connection
from myownwebserver.handlers import RequestHandler
from myownwebserver.logsink import PACKAGE_LOGGER


INDEX_HTML = b"<!DOCTYPE html>\n<html><body><h1>Hello</h1></body></html>\n"
STYLE_CSS = b"body { color: #333; }\n"
APP_JS = b"console.log('hi');\n"
# PNG signature plus bytes that are not valid UTF-8
LOGO_PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe\x00\x80"


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """A document root with a handful of typed files."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "app.js").write_bytes(APP_JS)
    (root / "logo.png").write_bytes(LOGO_PNG)
    (root / "docs").mkdir()
    (root / "docs" / "Guide.HTM").write_bytes(b"<p>guide</p>")
    (root / "notes").mkdir()
    return root


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Test configuration: no log file, short timeouts."""
    return ServerConfig(
        root_dir=str(doc_root),
        host="127.0.0.1",
        port=8080,
        timeout=5.0,
        min_workers=2,
        max_workers=4,
        log_file=None,
    )


@pytest.fixture
def handler(config: ServerConfig) -> RequestHandler:
    return RequestHandler(config)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def read_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def exchange(handler: RequestHandler) -> Callable[..., bytes]:
    """
    Run the handler over a socketpair.

    Sends raw bytes as the client, lets the handler serve the connection
    synchronously, and returns everything the client received.
    """
    def _exchange(raw: bytes, request_handler: RequestHandler = None) -> bytes:
        server_sock, client_sock = socket.socketpair()
        try:
            client_sock.settimeout(5.0)
            client_sock.sendall(raw)
            client_sock.shutdown(socket.SHUT_WR)

            conn = Connection(socket=server_sock, address=("127.0.0.1", 0), timeout=5.0)
            (request_handler or handler).handle(conn)

            return read_all(client_sock)
        finally:
            client_sock.close()
            server_sock.close()

    return _exchange


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split a response into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("ascii").split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


@pytest.fixture
def parse_response() -> Callable[[bytes], tuple[str, dict, bytes]]:
    return split_response


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self.errors: list[BaseException] = []
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:
            self.errors.append(e)

    def start(self):
        """Start server in background thread and wait until it accepts."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.errors}")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes) -> bytes:
        """
        Open a connection, send raw bytes, read the whole response.

        An empty request half-closes immediately, like a client that
        connects and hangs up.
        """
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            if raw:
                sock.sendall(raw)
            else:
                sock.shutdown(socket.SHUT_WR)
            return read_all(sock)


@pytest.fixture
def start_server(config: ServerConfig, free_port: int) -> Generator[Callable[..., TestServer], None, None]:
    """Factory: start a WebServer with optional config overrides."""
    started: list[TestServer] = []

    def _start(**overrides) -> TestServer:
        overrides.setdefault("port", free_port)
        test_srv = TestServer(WebServer(config.with_overrides(**overrides)))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield _start

    for test_srv in started:
        test_srv.stop()


@pytest.fixture
def package_logger() -> Generator[logging.Logger, None, None]:
    """Restore the package logger after configure_logging() changed it."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
