"""
Unit tests for RequestHandler: dispatch outcomes and full exchanges.
"""

import os
import socket
import struct
import time

import pytest

from myownwebserver.core.connection import Connection
from myownwebserver.handlers import (
    RequestHandler,
    MethodRejected,
    NotFound,
    Served,
    NOT_FOUND_MESSAGE,
    NOT_IMPLEMENTED_MESSAGE,
)


class TestDispatch:
    """dispatch() returns outcome values instead of raising."""

    def test_served(self, handler, doc_root):
        outcome = handler.dispatch("GET /style.css HTTP/1.1")

        assert isinstance(outcome, Served)
        assert outcome.path == os.path.join(str(doc_root), "style.css")
        assert outcome.content_type == "text/css"
        assert outcome.body == (doc_root / "style.css").read_bytes()

    def test_root_serves_index(self, handler, doc_root):
        outcome = handler.dispatch("GET / HTTP/1.1")

        assert isinstance(outcome, Served)
        assert outcome.path == os.path.join(str(doc_root), "index.html")
        assert outcome.content_type == "text/html"

    def test_nested_and_upper_case_extension(self, handler):
        outcome = handler.dispatch("GET /docs/Guide.HTM HTTP/1.1")

        assert isinstance(outcome, Served)
        assert outcome.content_type == "text/html"

    def test_missing_file(self, handler):
        assert isinstance(handler.dispatch("GET /missing.txt HTTP/1.1"), NotFound)

    def test_directory_is_not_a_file(self, handler):
        assert isinstance(handler.dispatch("GET /notes HTTP/1.1"), NotFound)

    @pytest.mark.parametrize("line", [
        "POST /index.html HTTP/1.1",
        "HEAD / HTTP/1.1",
        "get / HTTP/1.1",
        "GET",
        "garbage",
    ])
    def test_method_rejected(self, handler, line):
        assert isinstance(handler.dispatch(line), MethodRejected)

    def test_traversal_blocked_when_confined(self, handler, doc_root):
        (doc_root.parent / "secret.txt").write_text("top secret")

        assert isinstance(handler.dispatch("GET /../secret.txt HTTP/1.1"), NotFound)

    @pytest.mark.parametrize("confine", [True, False])
    def test_nul_byte_in_target_is_not_found(self, config, confine):
        handler = RequestHandler(config.with_overrides(confine_to_root=confine))

        assert isinstance(handler.dispatch("GET /index\x00.html HTTP/1.1"), NotFound)

    def test_traversal_allowed_when_not_confined(self, config, doc_root):
        (doc_root.parent / "secret.txt").write_text("top secret")
        handler = RequestHandler(config.with_overrides(confine_to_root=False))

        outcome = handler.dispatch("GET /../secret.txt HTTP/1.1")

        assert isinstance(outcome, Served)
        assert outcome.body == b"top secret"
        assert outcome.content_type == "application/octet-stream"


class TestHandle:
    """handle() over a socketpair: the bytes a client actually sees."""

    def test_get_index(self, exchange, parse_response, doc_root):
        expected = (doc_root / "index.html").read_bytes()

        status, headers, body = parse_response(exchange(b"GET /index.html HTTP/1.1\r\nHost: x\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers == {"Content-Type": "text/html", "Content-Length": str(len(expected))}
        assert body == expected

    def test_binary_file_bytes_exact(self, exchange, parse_response, doc_root):
        status, headers, body = parse_response(exchange(b"GET /logo.png HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/png"
        assert body == (doc_root / "logo.png").read_bytes()

    def test_missing_file(self, exchange):
        raw = exchange(b"GET /missing.txt HTTP/1.1\r\n\r\n")

        assert raw == (
            b"HTTP/1.1 404 Not Found\r\n"
            b"Content-Type: text/plain\r\n"
            + f"Content-Length: {len(NOT_FOUND_MESSAGE)}\r\n\r\n".encode()
            + b"The requested resource was not found."
        )

    def test_post_is_not_implemented(self, exchange, parse_response):
        status, headers, body = parse_response(exchange(b"POST /index.html HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 501 Not Implemented"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Content-Length"] == str(len(NOT_IMPLEMENTED_MESSAGE))
        assert body == b"At the present this server only processes HTTP GET requests."

    def test_nul_byte_in_target_answers_404(self, exchange, parse_response):
        status, _, body = parse_response(exchange(b"GET /index\x00.html HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body == NOT_FOUND_MESSAGE.encode()

    def test_single_token_line_is_not_implemented(self, exchange, parse_response):
        status, _, _ = parse_response(exchange(b"GET\r\n"))

        assert status == "HTTP/1.1 501 Not Implemented"

    @pytest.mark.parametrize("raw", [b"", b"\r\n", b"\n", b"GET /index.ht"])
    def test_no_line_no_response(self, exchange, raw):
        """Empty line or EOF before a full line: nothing sent, nothing raised."""
        assert exchange(raw) == b""

    def test_repeat_requests_identical(self, exchange):
        first = exchange(b"GET /app.js HTTP/1.1\r\n\r\n")
        second = exchange(b"GET /app.js HTTP/1.1\r\n\r\n")

        assert first == second
        assert b"Content-Type: application/javascript\r\n" in first

    def test_logs_request_and_file(self, exchange, caplog, doc_root):
        caplog.set_level("INFO", logger="myownwebserver")
        exchange(b"GET /style.css HTTP/1.1\r\n\r\n")

        path = os.path.join(str(doc_root), "style.css")
        size = len((doc_root / "style.css").read_bytes())
        assert "Request received: GET /style.css HTTP/1.1" in caplog.messages
        assert f"File served: {path} ({size} bytes, text/css)" in caplog.messages

    def test_logs_error_responses(self, exchange, caplog):
        caplog.set_level("INFO", logger="myownwebserver")
        exchange(b"GET /nope HTTP/1.1\r\n\r\n")
        exchange(b"DELETE / HTTP/1.1\r\n\r\n")

        assert "Response sent: 404 Not Found" in caplog.messages
        assert "Response sent: 501 Not Implemented" in caplog.messages

    def test_unreadable_file_is_logged_not_raised(self, exchange, caplog, monkeypatch, handler):
        caplog.set_level("INFO", logger="myownwebserver")

        def broken_dispatch(line):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(handler, "dispatch", broken_dispatch)

        assert exchange(b"GET /index.html HTTP/1.1\r\n\r\n") == b""
        assert any(m.startswith("Error processing request:") for m in caplog.messages)

    def test_connection_closed_after_timeout(self, handler, caplog):
        """A client that never sends: the handler gives up and closes."""
        caplog.set_level("INFO", logger="myownwebserver")
        server_sock, client_sock = socket.socketpair()
        try:
            conn = Connection(socket=server_sock, address=("127.0.0.1", 0), timeout=0.2)
            handler.handle(conn)

            client_sock.settimeout(5.0)
            assert client_sock.recv(10) == b""
            assert any("Timed out" in m for m in caplog.messages)
        finally:
            client_sock.close()
            server_sock.close()

    def test_reset_before_request_line_is_logged(self, handler, caplog):
        caplog.set_level("INFO", logger="myownwebserver")

        with socket.create_server(("127.0.0.1", 0)) as listener:
            client = socket.create_connection(listener.getsockname()[:2], timeout=5.0)
            server_sock, address = listener.accept()
            # Zero linger: close() sends RST instead of FIN
            client.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
            client.close()
            time.sleep(0.1)

            handler.handle(Connection(socket=server_sock, address=address, timeout=5.0))

        assert "Error processing request: Connection reset by peer" in caplog.messages
