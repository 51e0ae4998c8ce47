"""
=============================================================================
userapi
=============================================================================

A small HTTP/1.1 JSON service for CRUD over an in-memory user collection,
served by a threaded socket server behind a three-stage middleware pipeline
(error boundary, bearer-token gate, request logging).

    from userapi import create_app, ServerConfig

    create_app(ServerConfig(port=8080)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .store import UserStore
from .models import User
from .app import create_app

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "UserStore",
    "User",
    "create_app",
    "__version__",
]
