"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

HTTPResponse is the value every handler and middleware returns; to_bytes()
serializes it for the socket:

    HTTPResponse(                        HTTP/1.1 201 Created\r\n
      status=201,                        Location: /users/3\r\n
      headers={"Location": ...},   ──►   Content-Type: application/json; ...\r\n
      body=b'{"id": 3, ...}'             Content-Length: 50\r\n
    )                                    Date: ...\r\n
                                         Server: userapi/1.0\r\n
                                         \r\n
                                         {"id": 3, ...}

ResponseBuilder gives a fluent way to put one together, and the module-level
helpers (ok, created, not_found, ...) cover the responses the service sends.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Union
import json

from .status_codes import HTTPStatus


DEFAULT_SERVER_NAME = "userapi/1.0"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass
class HTTPResponse:
    """An HTTP response waiting to be serialized."""

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {HTTPStatus(self.status).phrase}"

    @property
    def json(self) -> Any:
        """Body decoded as JSON, or None for an empty body."""
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize status line, headers and body.

        Content-Length, Date and Server are filled in unless already set.
        A 204 carries neither a body nor a Content-Length.
        """
        response_headers = dict(self.headers)

        if self.status == HTTPStatus.NO_CONTENT:
            response_headers.pop("Content-Length", None)
            body = b""
        else:
            response_headers.setdefault("Content-Length", str(len(self.body)))
            body = self.body

        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return "\r\n".join(lines).encode("utf-8") + b"\r\n" + body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .header("Location", "/users/3")
            .json(user.to_dict())
            .build())

    Every method except build() returns the builder.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: Union[HTTPStatus, int]) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Serialize data as the JSON body and set Content-Type.

        ensure_ascii=False keeps non-ASCII names readable; the body is UTF-8.
        """
        self._body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an RFC 7231 HTTP-date.

    Example: "Wed, 01 Jan 2026 12:00:00 GMT"
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE RESPONSES
# =============================================================================

def ok(body: Union[dict, list]) -> HTTPResponse:
    """200 OK with a JSON body."""
    return ResponseBuilder().status(HTTPStatus.OK).json(body).build()


def created(body: Union[dict, list, None] = None, location: Optional[str] = None) -> HTTPResponse:
    """201 Created, with a Location header when given."""
    builder = ResponseBuilder().status(HTTPStatus.CREATED)

    if body is not None:
        builder.json(body)

    if location:
        builder.header("Location", location)

    return builder.build()


def no_content() -> HTTPResponse:
    """204 No Content."""
    return ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()


def error_response(status: Union[HTTPStatus, int], message: str) -> HTTPResponse:
    """Any status with the service's error body: {"error": message}."""
    return ResponseBuilder().status(status).json({"error": message}).build()


def unauthorized(message: str = "Unauthorized") -> HTTPResponse:
    """
    401 Unauthorized.

    WWW-Authenticate advertises the bearer scheme the auth gate expects.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.UNAUTHORIZED)
        .header("WWW-Authenticate", "Bearer")
        .json({"error": message})
        .build())


def not_found(message: str = "Not Found") -> HTTPResponse:
    """404 Not Found."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """405 Method Not Allowed with the Allow header RFC 7231 requires."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def internal_error(message: str = "Internal server error.") -> HTTPResponse:
    """500 Internal Server Error. Keep the message generic."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
