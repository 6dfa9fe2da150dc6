"""
Unit tests for request line parsing.
"""

import pytest

from myownwebserver.http.request import Request, parse_request_line


class TestParseRequestLine:
    """Tests for parse_request_line()."""

    def test_parse_simple_get(self):
        """Test parsing a full request line."""
        request = parse_request_line("GET /index.html HTTP/1.1")

        assert request.method == "GET"
        assert request.target == "/index.html"
        assert request.is_supported

    def test_strips_line_terminator(self):
        """CRLF and bare LF are both removed."""
        assert parse_request_line("GET /a HTTP/1.1\r\n") == Request(method="GET", target="/a")
        assert parse_request_line("GET /a\n") == Request(method="GET", target="/a")

    def test_two_tokens_is_enough(self):
        """HTTP/0.9 style line without a version."""
        request = parse_request_line("GET /page.html")

        assert request.target == "/page.html"

    @pytest.mark.parametrize("line", ["", "GET", "GET\r\n", "/index.html"])
    def test_fewer_than_two_tokens(self, line):
        """Lines that cannot carry method and target give None."""
        assert parse_request_line(line) is None

    def test_splits_on_single_spaces(self):
        """Two spaces produce an empty target token."""
        request = parse_request_line("GET  /index.html HTTP/1.1")

        assert request.target == ""

    @pytest.mark.parametrize("method", ["POST", "HEAD", "PUT", "get", "Get"])
    def test_other_methods_are_not_supported(self, method):
        """Only the exact token GET is supported."""
        request = parse_request_line(f"{method} /index.html HTTP/1.1")

        assert request.method == method
        assert not request.is_supported

    def test_request_is_immutable(self):
        request = Request(method="GET", target="/")

        with pytest.raises(AttributeError):
            request.target = "/other"
