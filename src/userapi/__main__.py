"""
=============================================================================
COMMAND LINE ENTRY POINT
=============================================================================

    python -m userapi                       # 127.0.0.1:8080
    python -m userapi --port 3000
    python -m userapi --host 0.0.0.0 --workers 8
    python -m userapi --token s3cret --log-format json

Unset flags fall back to USERAPI_* environment variables, then to the
ServerConfig defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .app import create_app
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userapi",
        description="In-memory user CRUD service over HTTP/JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m userapi                        # Run with defaults
  python -m userapi --port 3000            # Custom port
  python -m userapi --token s3cret         # Clients send "Authorization: Bearer s3cret"
  curl -H "Authorization: Bearer my-secret-token" http://127.0.0.1:8080/users
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None,
                        help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None,
                        help="Port to listen on (default: 8080)")
    parser.add_argument("--workers", "-w", type=int, default=None,
                        help="Minimum worker threads; max is twice this (default: 4)")

    # ─────────────────────────────────────────────────────────────────────
    # AUTH / LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--token", "-t", default=None,
                        help="Bearer token clients must present")
    parser.add_argument("--log-level", "-l",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None,
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=["text", "json"], default=None,
                        help="Access log format (default: text)")

    parser.add_argument("--version", "-v", action="version",
                        version=f"userapi {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with CLI flags layered on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.min_workers = args.workers
        config.max_workers = args.workers * 2
    if args.token is not None:
        config.api_token = args.token
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = create_app(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
