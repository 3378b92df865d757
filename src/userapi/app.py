"""
=============================================================================
APPLICATION FACTORY
=============================================================================

Assembles the User API:

    create_app(config, store)
        │
        ├── HTTPServer(config)
        ├── use(ErrorHandlingMiddleware())              outermost
        ├── use(ApiKeyMiddleware(config.api_keys))
        ├── use(LoggingMiddleware(config.log_format))   innermost
        └── UserHandlers(store).register(router)

The middleware order is part of the service's contract: a request with a
bad key is rejected before it is logged or routed, and a fault anywhere
below error handling still produces a 500.

=============================================================================
"""

from typing import List, Optional

from .config import ServerConfig
from .middleware import (
    Middleware,
    ErrorHandlingMiddleware,
    ApiKeyMiddleware,
    LoggingMiddleware,
)
from .server import HTTPServer
from .users import UserHandlers, UserStore


def default_middleware(config: ServerConfig) -> List[Middleware]:
    """The service's middleware stages, outermost first."""
    return [
        ErrorHandlingMiddleware(),
        ApiKeyMiddleware(config.api_keys),
        LoggingMiddleware(log_format=config.log_format),
    ]


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[UserStore] = None,
) -> HTTPServer:
    """
    Build a ready-to-run User API server.

    Args:
        config: Server configuration; defaults when omitted.
        store: The user store to serve; a fresh empty one when omitted.

    Returns:
        The configured HTTPServer. Its store is available as ``app.store``.

    Example:
        app = create_app(ServerConfig(port=3000))
        app.run()
    """
    app = HTTPServer(config)
    app.store = store if store is not None else UserStore()

    for middleware in default_middleware(app.config):
        app.use(middleware)

    UserHandlers(app.store).register(app.router)
    return app
