"""
=============================================================================
USER API CLI ENTRY POINT
=============================================================================

    python -m userapi
    python -m userapi --port 3000
    python -m userapi --host 0.0.0.0 --workers 32
    python -m userapi --api-key key-one --api-key key-two
    userapi --log-level DEBUG                 # console script

Settings are resolved in three layers, highest first:

    1. command-line flags
    2. environment variables (see ServerConfig.from_env)
    3. ServerConfig defaults

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .app import create_app
from .config import ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userapi",
        description="In-memory User CRUD service protected by API keys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  userapi                                   # Run with defaults (or env vars)
  userapi --port 3000                       # Custom port
  userapi --host 0.0.0.0                    # Listen on all interfaces
  userapi --api-key s3cret                  # Replace the built-in keys
  HTTP_LOG_FORMAT=json userapi              # JSON access log
        """
    )

    # Defaults are None so "not given" can fall through to the environment.
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum number of worker threads (default: 16)"
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--api-key", "-k",
        dest="api_keys",
        action="append",
        default=None,
        metavar="KEY",
        help="Accepted X-API-Key value; repeat for several. Replaces the default keys."
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"userapi {__version__}"
    )
    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with every given flag applied on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, args.workers)
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.api_keys is not None:
        config.api_keys = tuple(args.api_keys)

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, build the app and serve until interrupted."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app = create_app(build_config(args))
    except ValueError as e:
        parser.error(str(e))

    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
