"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    SocketServer ──accept──► ThreadPool ──worker──► _process_connection
                                                          │
                             RequestParser ◄──────────────┤ raw bytes
                                                          │
                     MiddlewarePipeline + Router ◄────────┘ HTTPRequest
                                                          │
                          HTTPResponse.to_bytes() ────────► socket

Each worker serves one connection at a time and loops over keep-alive
requests until the client closes, asks for "Connection: close", or idles
past keep_alive_timeout.

Errors that happen before the pipeline (unparseable request, read timeout,
oversized request) are answered here and the connection is closed. Errors
inside the pipeline are the error boundary's job; the 500 guard below is a
last resort for a pipeline assembled without one.

=============================================================================
"""

import logging
from typing import Optional, Callable, Union

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool, RequestTooLarge
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    Router,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server with a middleware pipeline and router.

        server = HTTPServer(ServerConfig(port=8080))
        server.use(ErrorBoundaryMiddleware())
        server.use(AuthMiddleware("my-secret-token"))

        server.router.add_route("/ping", ping, method="GET")

        server.run()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = Router()
        self._middleware = MiddlewarePipeline()

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False

    # =========================================================================
    # ASSEMBLY
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Append a middleware stage (first added runs outermost)."""
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run one request through middleware and router, without any sockets.

        This is the same path a network request takes after parsing.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)
        return self._handler(request)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving (blocks until shutdown() or SIGINT/SIGTERM).

        Args:
            host: Override config.host.
            port: Override config.port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()
        logger.debug(f"Thread pool running {self._thread_pool.worker_count} workers")
        self._running = True

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )
        logger.info(f"Middleware: {' -> '.join(self._middleware.stages) or '(none)'}")
        for line in self._router.describe_routes():
            logger.info(f"Route: {line}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting connections; run() returns once workers drain."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    @property
    def address(self) -> tuple:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("userapi").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a freshly accepted connection to the pool (503 if full)."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            timeout=self.config.timeout,
            on_expire=lambda: self._reject_expired(conn),
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _reject_expired(self, conn: Connection):
        """A queued connection waited past config.timeout for a worker."""
        logger.warning(f"[{conn.id}] Waited too long for a worker, rejecting connection")
        with conn:
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")

    def _process_connection(self, conn: Connection):
        """Keep-alive loop for one connection (runs in a worker thread)."""
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except RequestTooLarge as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.warning(f"[{conn.id}] Bad request: {e}")
                    self._send_error(conn, e.status_code, str(e))
                    break

                response = self._dispatch(conn, request)

                keep_alive = request.is_keep_alive and self.config.keep_alive
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                if not conn.send_response(response.to_bytes(self.config.server_name)):
                    break

                if not keep_alive:
                    break

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return (ResponseBuilder()
                .status(HTTPStatus.INTERNAL_SERVER_ERROR)
                .json({"error": "Internal server error."})
                .build())

    def _send_error(self, conn: Connection, status: Union[HTTPStatus, int], message: str):
        response = (ResponseBuilder()
            .status(status)
            .json({"error": message})
            .close_connection()
            .build())
        conn.send_response(response.to_bytes(self.config.server_name))
