"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted socket and turns its byte stream into whole HTTP
requests.

TCP does not preserve message boundaries: one recv() may return half a
request line, or the end of one request and the start of the next. The
connection buffers until it has seen the header terminator and then exactly
Content-Length body bytes; anything beyond that stays buffered for the next
request on a keep-alive connection.

    read_request() ──► send_response() ──► read_request() ──► ... ──► close()
         │                                      │
    first request:                         later requests:
    config.timeout → TimeoutError          keep_alive_timeout → None

=============================================================================
"""

import socket
import logging
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class RequestTooLarge(Exception):
    """The client sent more than max_request_size bytes for one request."""


@dataclass
class Connection:
    """
    A client connection.

    Use as a context manager so the socket is always closed:

        with conn:
            raw = conn.read_request()
            conn.send_response(response.to_bytes())
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    requests_handled: int = 0
    closed: bool = False

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0          # first request
    keep_alive_timeout: float = 5.0          # subsequent requests
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request (headers + body).

        Returns:
            The raw request bytes, or None if the client closed the
            connection or an idle keep-alive connection timed out.

        Raises:
            TimeoutError: The first request did not arrive in time.
            RequestTooLarge: The request exceeds max_request_size.
        """
        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                self._check_size()

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # the parser reports the short body
                self._buffer += chunk
                self._check_size()

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            return request_data

        except socket.timeout:
            if self.requests_handled > 0:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _check_size(self):
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(self._buffer)} bytes")

    @staticmethod
    def _parse_content_length(headers: bytes) -> int:
        # Invalid values read as 0 here; RequestParser rejects them properly.
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """Send a serialized response. False if the peer has gone away."""
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close gracefully: half-close, drain briefly, then release the socket.

        Safe to call more than once.
        """
        if self.closed:
            return
        self.closed = True

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
