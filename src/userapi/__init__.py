"""
=============================================================================
USER MANAGEMENT API
=============================================================================

A small HTTP/1.1 service exposing CRUD over users kept in process memory,
behind a fixed middleware chain:

    request ─► ErrorHandling ─► ApiKey ─► Logging ─► Router ─► handler
                                                                 │
                                               UserStore ◄───────┘

    GET    /                    home page (public)
    GET    /api/users           list
    GET    /api/users/{id}      fetch one
    POST   /api/users           create
    PUT    /api/users/{id}      replace
    DELETE /api/users/{id}      remove

Everything under /api needs an X-API-Key header.

    from userapi import create_app, ServerConfig

    app = create_app(ServerConfig(port=8080))
    app.run()

Packages:

    userapi.http         request parsing, responses, routing
    userapi.middleware   pipeline and the three stages
    userapi.users        model, validation, store, handlers
    userapi.core         sockets, connections, thread pool

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import create_app, default_middleware

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "default_middleware",
    "__version__",
]
