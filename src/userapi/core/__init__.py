"""
Networking and concurrency core: listening socket, client connections,
worker thread pool.
"""

from .socket_server import SocketServer
from .connection import Connection, RequestTooLarge
from .thread_pool import ThreadPool


__all__ = [
    "SocketServer",      # accepts TCP connections
    "Connection",        # one client socket, request framing
    "RequestTooLarge",
    "ThreadPool",        # worker threads
]
