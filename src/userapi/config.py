"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All runtime settings of the service in one dataclass.

    ┌─────────────────────────────────────────────────────────────────┐
    │  Priority (highest to lowest):                                  │
    │                                                                 │
    │   1. Command-line arguments                                     │
    │      └── userapi --port 3000 --api-key secret                   │
    │                                                                 │
    │   2. Environment variables                                      │
    │      └── HTTP_PORT=3000 API_KEYS=a,b userapi                    │
    │                                                                 │
    │   3. Default values (in this dataclass)                         │
    └─────────────────────────────────────────────────────────────────┘

Validation happens once, at server construction, so a bad value fails
the process at startup instead of on the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


DEFAULT_API_KEYS: Tuple[str, ...] = ("api-key-12345", "admin-api-key-67890")

LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the User API server.

        Development:
            ServerConfig(port=8080, log_level="DEBUG")

        Production:
            ServerConfig(
                host="0.0.0.0",
                max_workers=32,
                log_format="json",
                api_keys=("...",),
            )
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind; "0.0.0.0" for all interfaces."""

    port: int = 8080

    backlog: int = 128
    """Pending connections the kernel queues before refusing."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = 30.0
    """Socket read timeout in seconds. None blocks forever."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    keep_alive_timeout: float = 5.0
    """Idle seconds before a kept-alive connection is closed."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """User payloads are tiny; anything bigger is rejected with 413."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16
    queue_size: int = 1000
    """Connections allowed to wait for a worker; beyond that, 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access-log format: "text" or "json"."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "UserAPI/1.0"

    # ─────────────────────────────────────────────────────────────────────
    # SECURITY
    # ─────────────────────────────────────────────────────────────────────

    api_keys: Tuple[str, ...] = DEFAULT_API_KEYS
    """Accepted X-API-Key values."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 8080)
        HTTP_WORKERS     Max worker threads (default: 16)
        HTTP_TIMEOUT     Socket timeout in seconds (default: 30)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access-log format, text or json (default: text)
        API_KEYS         Comma-separated allow-list (default: the built-in keys)

        Usage:
            HTTP_PORT=3000 API_KEYS=key-one,key-two python -m userapi
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            max_workers=int(os.getenv("HTTP_WORKERS", "16")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
            api_keys=parse_api_keys(os.getenv("API_KEYS")),
        )

    def validate(self) -> None:
        """
        Check every value, failing fast.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

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

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if not self.api_keys:
            raise ValueError("api_keys must contain at least one key")


def parse_api_keys(value: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-separated key list.

        parse_api_keys("a, b,,c")  → ("a", "b", "c")
        parse_api_keys(None)       → DEFAULT_API_KEYS
    """
    if value is None:
        return DEFAULT_API_KEYS
    return tuple(key.strip() for key in value.split(",") if key.strip())
