"""
Middleware stages for the request pipeline.

The service installs them in this order:

    ErrorBoundaryMiddleware   outermost, turns failures into 500/4xx JSON
    AuthMiddleware            bearer token gate, 401 short-circuit
    LoggingMiddleware         "Request: ..." / "Response: ..." lines
"""

from .base import (
    Middleware,
    MiddlewarePipeline,
    NextHandler,
    FunctionMiddleware,
    function_middleware,
)
from .errors import ErrorBoundaryMiddleware
from .auth import AuthMiddleware
from .logging import LoggingMiddleware

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "FunctionMiddleware",
    "function_middleware",

    # Stages
    "ErrorBoundaryMiddleware",
    "AuthMiddleware",
    "LoggingMiddleware",
]
