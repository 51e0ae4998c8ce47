"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes read by a Connection into an HTTPRequest.

    b"POST /users HTTP/1.1\r\n"                HTTPRequest(
    b"Authorization: Bearer ...\r\n"    ──►       method="POST",
    b"Content-Length: 40\r\n"                     path="/users",
    b"\r\n"                                       headers={"authorization": ...},
    b'{"name": "Carl", ...}'                      body=b'{"name": "Carl", ...}')

Header names are normalized to lowercase at parse time (RFC 7230 makes them
case-insensitive), so middleware looks up "authorization" and never has to
think about "Authorization" vs "AUTHORIZATION".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from urllib.parse import urlparse, unquote
import re
import json

from ..errors import ClientError


class HTTPParseError(ClientError):
    """
    Raised when a request (or its JSON body) cannot be parsed.

    The status code tells the caller what to answer:

        400 Bad Request                 malformed syntax or JSON
        405 Method Not Allowed          unknown method
        413 Payload Too Large           over max_request_size
        505 HTTP Version Not Supported  not HTTP/1.0 or HTTP/1.1
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, status_code=status_code)


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         GET, POST, PUT, DELETE, ...
        path:           Request path without the query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header name (lowercase) → value
        body:           Raw body bytes (Content-Length bytes)
        path_params:    Filled by the router: "/users/:id" → {"id": "3"}
        client_address: (ip, port) of the peer
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)

    _body_json: Optional[Any] = field(default=None, repr=False)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def authorization(self) -> Optional[str]:
        """Raw Authorization header, or None when the client sent none."""
        return self.headers.get("authorization")

    @property
    def json(self) -> Any:
        """
        The body decoded as JSON (parsed once, then cached).

        An empty body yields None.

        Raises:
            HTTPParseError: If the body is not valid UTF-8 JSON.
        """
        if self._body_json is None and self.body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise HTTPParseError(f"Invalid JSON body: {e}")
        return self._body_json

    @property
    def is_keep_alive(self) -> bool:
        """
        Whether the connection should stay open after this request.

        HTTP/1.1 keeps alive unless "Connection: close";
        HTTP/1.0 closes unless "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

        1. size check             → 413
        2. find \\r\\n\\r\\n          → 400 if missing
        3. request line           → 400 / 405 / 505
        4. headers                (lowercased, repeated values joined)
        5. body by Content-Length → 400 if short or invalid
    """

    VALID_METHODS = {
        "GET",
        "POST",
        "PUT",
        "DELETE",
        "PATCH",
        "HEAD",
        "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Raw request bytes as read from the socket.
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError(
                f"Invalid Content-Length: {headers['content-length']}"
            )

        if content_length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length}")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, str]:
        """Split "METHOD SP URI SP VERSION" and decode the URI."""
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"

        if ".." in path:
            raise HTTPParseError("Invalid path: contains ..")

        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: value" lines.

        Names are lowercased, values stripped. Continuation lines (leading
        whitespace) extend the previous header; repeated headers are joined
        with ", ". Malformed lines are skipped.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers

