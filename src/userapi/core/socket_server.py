"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and hands every accepted client to a callback:

    socket() → setsockopt() → bind() → listen() → accept loop
                                                      │
                                          Connection(client socket)
                                                      │
                                          connection_handler(conn)

The accept loop polls with a 1 second timeout so shutdown() is noticed
promptly. SIGINT/SIGTERM trigger shutdown() when the server runs in the
main thread (signal handlers can only be installed there).

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """Low-level TCP server used by HTTPServer."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()
        self._original_handlers: dict = {}
        self._bound_address: Optional[Tuple[str, int]] = None

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound (port resolved when configured as 0).

        Falls back to the configured address before start().
        """
        return self._bound_address or (self.config.host, self.config.port)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready.wait(timeout)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind right after restart without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Small JSON responses: do not wait to coalesce packets
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # Lets the accept loop check self._running once a second
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop (blocks until shutdown()).

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()
        self._ready.set()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                keep_alive_timeout=self.config.keep_alive_timeout,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """Ask the accept loop to stop; returns immediately."""
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()
        self._ready.clear()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Socket server stopped")
