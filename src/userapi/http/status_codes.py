"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Status codes the service can emit, as an IntEnum so they compare equal to
plain integers (HTTPStatus.NOT_FOUND == 404) while still carrying a reason
phrase for the status line.

    ┌───────┬──────────────────────────────────────────────────────────────┐
    │ Class │ Used by                                                      │
    ├───────┼──────────────────────────────────────────────────────────────┤
    │  2xx  │ user handlers (200 list/get/update, 201 create, 204 delete)  │
    │  4xx  │ auth gate (401), handlers (400, 404), router (404, 405),     │
    │       │ request parser (400, 405, 413), read timeout (408)           │
    │  5xx  │ error boundary (500), overloaded pool (503), parser (505)    │
    └───────┴──────────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """HTTP response status codes with reason phrases."""

    # 2xx Success
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 4xx Client errors
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413

    # 5xx Server errors
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (e.g. "Not Found")."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NO_CONTENT: "No Content",

    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
