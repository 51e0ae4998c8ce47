"""
HTTP protocol layer: request parsing, response building, routing, status codes.
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    created,             # 201 Created
    no_content,          # 204 No Content
    error_response,      # any status, {"error": ...}
    unauthorized,        # 401 Unauthorized
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "no_content",
    "error_response",
    "unauthorized",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]
