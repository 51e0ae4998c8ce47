"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. Build it directly, from CLI arguments
(see __main__.py) or from the environment:

    USERAPI_PORT=3000 USERAPI_TOKEN=s3cret python -m userapi

    ┌───────────────────────┬──────────────────────┬────────────────────┐
    │ Field                 │ Environment variable │ Default            │
    ├───────────────────────┼──────────────────────┼────────────────────┤
    │ host                  │ USERAPI_HOST         │ 127.0.0.1          │
    │ port                  │ USERAPI_PORT         │ 8080               │
    │ max_workers           │ USERAPI_WORKERS      │ 16                 │
    │ timeout               │ USERAPI_TIMEOUT      │ 30                 │
    │ api_token             │ USERAPI_TOKEN        │ my-secret-token    │
    │ log_level             │ USERAPI_LOG_LEVEL    │ INFO               │
    │ log_format            │ USERAPI_LOG_FORMAT   │ text               │
    └───────────────────────┴──────────────────────┴────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_API_TOKEN = "my-secret-token"


@dataclass
class ServerConfig:
    """Configuration for the user API server."""

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" listens on all interfaces."""

    port: int = 8080
    """TCP port. 0 lets the OS pick a free one."""

    backlog: int = 128
    """Pending connections the kernel queues before refusing."""

    buffer_size: int = 8192
    """Bytes read per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket timeout for reading the first request on a connection."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0
    max_request_size: int = 1024 * 1024  # 1 MB, user records are tiny

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16
    queue_size: int = 100
    """Connections waiting for a worker before new ones get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # AUTH
    # ─────────────────────────────────────────────────────────────────────

    api_token: str = DEFAULT_API_TOKEN
    """Shared secret; clients send "Authorization: Bearer <api_token>"."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: "text" or "json"."""

    server_name: str = "userapi/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Build a config from USERAPI_* environment variables."""
        return cls(
            host=os.getenv("USERAPI_HOST", "127.0.0.1"),
            port=int(os.getenv("USERAPI_PORT", "8080")),
            max_workers=int(os.getenv("USERAPI_WORKERS", "16")),
            timeout=float(os.getenv("USERAPI_TIMEOUT", "30")),
            api_token=os.getenv("USERAPI_TOKEN", DEFAULT_API_TOKEN),
            log_level=os.getenv("USERAPI_LOG_LEVEL", "INFO"),
            log_format=os.getenv("USERAPI_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Fail fast on impossible values.

        Raises:
            ValueError: Describing the first invalid field.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.api_token:
            raise ValueError("api_token must not be empty")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Unknown log_format: {self.log_format}")
