"""
Unit tests for HTTP request parsing.
"""

import pytest

from userapi.errors import ClientError
from userapi.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
)


PARSER = RequestParser()


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/users"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed and lowercased."""
        request = PARSER.parse(sample_get_request)

        assert request.user_agent == "pytest"
        assert request.headers["accept"] == "application/json"
        assert request.authorization == "Bearer my-secret-token"
        assert request.is_keep_alive is True

    def test_query_string_not_part_of_path(self, sample_get_request: bytes):
        request = PARSER.parse(sample_get_request)

        assert request.path == "/users"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with JSON body."""
        request = PARSER.parse(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/users"
        assert request.json == {"name": "Carl", "email": "carl@x.com"}
        assert request.is_keep_alive is False

    def test_parse_invalid_method(self):
        """Test that unknown methods are rejected with 405."""
        raw = b"INVALID /users HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            PARSER.parse(raw)

        assert exc_info.value.status_code == 405

    def test_parse_invalid_request_line(self):
        """Test handling of malformed request line."""
        raw = b"GET\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            PARSER.parse(raw)

        assert exc_info.value.status_code == 400

    def test_parse_unsupported_version(self):
        raw = b"GET /users HTTP/2.0\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            PARSER.parse(raw)

        assert exc_info.value.status_code == 505

    def test_parse_missing_terminator(self):
        with pytest.raises(HTTPParseError):
            PARSER.parse(b"GET /users HTTP/1.1\r\nHost: test\r\n")

    def test_parse_path_traversal_blocked(self):
        """Test that path traversal attempts are blocked."""
        raw = b"GET /../../../etc/passwd HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            PARSER.parse(raw)

        assert "path" in str(exc_info.value).lower()

    def test_parse_request_too_large(self):
        """Test that oversized requests are rejected."""
        parser = RequestParser(max_request_size=100)
        raw = b"GET / HTTP/1.1\r\n" + b"X-Large: " + b"A" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_invalid_content_length(self):
        raw = b"POST /users HTTP/1.1\r\nContent-Length: abc\r\n\r\n"

        with pytest.raises(HTTPParseError):
            PARSER.parse(raw)

    def test_short_body_rejected(self):
        raw = b"POST /users HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc"

        with pytest.raises(HTTPParseError) as exc_info:
            PARSER.parse(raw)

        assert "Incomplete body" in str(exc_info.value)

    def test_body_trimmed_to_content_length(self):
        body = b"test body"
        raw = b"POST / HTTP/1.1\r\nContent-Length: 9\r\n\r\n" + body + b"EXTRA"

        request = PARSER.parse(raw)
        assert request.body == body

    def test_http_version_keep_alive_defaults(self):
        """HTTP/1.0 closes by default, HTTP/1.1 keeps alive."""
        request_10 = PARSER.parse(b"GET / HTTP/1.0\r\nHost: test\r\n\r\n")
        assert request_10.is_keep_alive is False

        request_11 = PARSER.parse(b"GET / HTTP/1.1\r\nHost: test\r\n\r\n")
        assert request_11.is_keep_alive is True

    def test_repeated_headers_joined(self):
        raw = b"GET / HTTP/1.1\r\nX-Tag: a\r\nX-Tag: b\r\n\r\n"
        request = PARSER.parse(raw)

        assert request.headers["x-tag"] == "a, b"

    def test_case_insensitive_headers(self):
        """Test that header names are case-insensitive."""
        raw = b"GET / HTTP/1.1\r\nAUTHORIZATION: Bearer x\r\n\r\n"
        request = PARSER.parse(raw)

        assert request.authorization == "Bearer x"
        assert "authorization" in request.headers


class TestHTTPRequestJSON:
    """Tests for the lazy JSON body."""

    def test_empty_body_is_none(self):
        request = HTTPRequest(method="POST", path="/users")
        assert request.json is None

    def test_invalid_json_raises_client_error(self):
        request = HTTPRequest(method="POST", path="/users", body=b"{not json")

        with pytest.raises(HTTPParseError) as exc_info:
            request.json

        assert isinstance(exc_info.value, ClientError)
        assert exc_info.value.status_code == 400

    def test_missing_authorization_is_none(self):
        request = HTTPRequest(method="GET", path="/users")
        assert request.authorization is None
