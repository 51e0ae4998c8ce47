"""
=============================================================================
BEARER TOKEN AUTH MIDDLEWARE
=============================================================================

Admits a request only if it carries exactly

    Authorization: Bearer <token>

Anything else (no header, empty header, other scheme, wrong token, extra
spaces) gets a 401 and the pipeline stops here:

    ┌──────────┐   match    ┌──────────┐
    │   Auth   │──────────► │  next()  │ ... handler, store
    └────┬─────┘            └──────────┘
         │ mismatch
         ▼
    401 {"error": "Unauthorized"}      (nothing downstream runs)

The token is a single shared secret from ServerConfig.api_token. This is an
access gate, not user authentication.

=============================================================================
"""

import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, unauthorized


logger = logging.getLogger("userapi.auth")


class AuthMiddleware(Middleware):
    """
    Bearer token gate.

    Args:
        token: The shared secret. The expected header value is
               "Bearer " + token.
        scheme: Authorization scheme prefix (default "Bearer").
    """

    def __init__(self, token: str, scheme: str = "Bearer"):
        if not token:
            raise ValueError("AuthMiddleware requires a non-empty token")
        self.expected = f"{scheme} {token}"

    def is_authorized(self, request: HTTPRequest) -> bool:
        header = request.authorization
        return bool(header) and header == self.expected

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        if not self.is_authorized(request):
            logger.warning(f"Unauthorized request: {request.method} {request.path}")
            return unauthorized("Unauthorized")

        return next(request)
