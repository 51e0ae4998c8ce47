"""
=============================================================================
REQUEST LOGGING MIDDLEWARE
=============================================================================

Logs each request twice, around the rest of the pipeline:

    INFO userapi.access: Request: POST /users
    ...handler runs...
    INFO userapi.access: Response: 201
    INFO userapi.access: 127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "POST /users" 201 50 0.42ms

The third line is the access-log entry (text, or JSON with log_format="json")
carrying a short request id, the body size and the duration.

In this service the stage sits behind the auth gate, so requests rejected
with 401 never reach it. It never modifies the response.

=============================================================================
"""

import time
import json
import uuid
import logging
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Namespaced so the access log can be routed separately:
#   logging.getLogger("userapi.access").addHandler(file_handler)
logger = logging.getLogger("userapi.access")


@dataclass
class RequestLog:
    """One access-log entry."""

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache combined log format, plus the duration."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request/response logging.

    Args:
        log_format: "text" (Apache-style) or "json" for the access entry.
        log_level: Level for all lines emitted by this stage.
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
    ):
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format}")
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        logger.log(self.log_level, f"Request: {request.method} {request.path}")

        start_time = time.time()
        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        logger.log(self.log_level, f"Response: {int(response.status)}")

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return response
