"""
=============================================================================
ERROR BOUNDARY MIDDLEWARE
=============================================================================

The outermost stage. Whatever goes wrong further in (auth, logging, routing,
handlers, the store) ends here and becomes a JSON response:

    ClientError (bad JSON, bad id)   →  its status, {"error": "<message>"}
    any other Exception              →  500, {"error": "Internal server error."}

The 500 body never carries exception text; the details go to the log only.

Must be added first:

    pipeline.add(ErrorBoundaryMiddleware())   # catches everything below
    pipeline.add(AuthMiddleware(token))
    pipeline.add(LoggingMiddleware())

=============================================================================
"""

import logging

from .base import Middleware, NextHandler
from ..errors import ClientError
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, error_response, internal_error


logger = logging.getLogger("userapi.errors")


INTERNAL_ERROR_MESSAGE = "Internal server error."


class ErrorBoundaryMiddleware(Middleware):
    """Convert exceptions from downstream stages into error responses."""

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        self.message = message

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        try:
            return next(request)
        except ClientError as e:
            logger.warning(
                f"Rejected {request.method} {request.path}: "
                f"{e.status_code} {e.message}"
            )
            return error_response(e.status_code, e.message)
        except Exception as e:
            logger.exception(f"Exception: {e}")
            return internal_error(self.message)
