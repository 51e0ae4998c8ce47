"""
Application factory: the user API wired onto an HTTPServer.

    Request ─► ErrorBoundary ─► Auth ─► Logging ─► Router ─► UserHandlers ─► UserStore

The stage order matters. The error boundary must be outermost to catch
failures from every later stage, and the auth gate runs before logging, so
rejected requests never reach the logger or the handlers.
"""

import logging
from typing import Optional

from .config import ServerConfig
from .handlers import UserHandlers
from .middleware import AuthMiddleware, ErrorBoundaryMiddleware, LoggingMiddleware
from .server import HTTPServer
from .store import UserStore


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[UserStore] = None,
) -> HTTPServer:
    """
    Build a ready-to-run server.

    Args:
        config: Server configuration (defaults to ServerConfig()).
        store: User store to serve; a fresh seeded store by default.

    Returns:
        An HTTPServer with middleware and /users routes registered.
    """
    config = config or ServerConfig()
    server = HTTPServer(config)

    server.use(ErrorBoundaryMiddleware())
    server.use(AuthMiddleware(config.api_token))
    server.use(LoggingMiddleware(
        log_format=config.log_format,
        log_level=logging.INFO,
    ))

    UserHandlers(store if store is not None else UserStore.seeded()).register(server.router)

    return server
