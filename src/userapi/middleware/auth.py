"""
=============================================================================
API KEY AUTHENTICATION
=============================================================================

Every request outside the public area must carry a known key:

    GET /api/users
    X-API-Key: api-key-12345

    ┌───────────────────────────────────────────────────────────────┐
    │  path public?  ── yes ──►  next(request)                      │
    │       │                                                       │
    │       no                                                      │
    │       ▼                                                       │
    │  header present? ── no ──►  401 "API Key header is required." │
    │       │                                                       │
    │       yes                                                     │
    │       ▼                                                       │
    │  key in allow-list? ── no ──►  401 "Invalid API key."         │
    │       │                                                       │
    │       yes ──►  next(request)                                  │
    └───────────────────────────────────────────────────────────────┘

Public area: the home page "/" and anything under the "/swagger" or
"/openapi" segments (case-insensitive). "/swaggerx" is NOT public; the
prefix has to end at a segment boundary.

Keys are compared by exact string equality. A header that is present but
empty is an invalid key, not a missing one.

=============================================================================
"""

from typing import Iterable, Tuple
import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, unauthorized


logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
MISSING_KEY_MESSAGE = "API Key header is required."
INVALID_KEY_MESSAGE = "Invalid API key."

PUBLIC_PATHS = frozenset({"/"})
PUBLIC_PREFIXES: Tuple[str, ...] = ("/swagger", "/openapi")


def is_public_path(path: str) -> bool:
    """
    True for paths that skip authentication.

        is_public_path("/")                     → True
        is_public_path("/Swagger/index.html")   → True
        is_public_path("/swaggerx")             → False
        is_public_path("/api/users")            → False
    """
    if path in PUBLIC_PATHS:
        return True

    lowered = path.lower()
    for prefix in PUBLIC_PREFIXES:
        if lowered == prefix or lowered.startswith(prefix + "/"):
            return True
    return False


class ApiKeyMiddleware(Middleware):
    """
    Reject requests without a valid X-API-Key header.

    Usage:
        pipeline.add(ApiKeyMiddleware(["api-key-12345"]))
    """

    def __init__(self, api_keys: Iterable[str], header_name: str = API_KEY_HEADER):
        """
        Args:
            api_keys: The allow-list; copied, so later changes to the
                      caller's collection have no effect.
            header_name: Request header carrying the key (matched
                         case-insensitively, like every header).
        """
        self.api_keys = frozenset(api_keys)
        self.header_name = header_name

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        if is_public_path(request.path):
            return next(request)

        if not request.has_header(self.header_name):
            logger.debug(f"Missing {self.header_name} for {request.method} {request.path}")
            return unauthorized(MISSING_KEY_MESSAGE)

        if request.get_header(self.header_name) not in self.api_keys:
            logger.warning(f"Invalid API key for {request.method} {request.path}")
            return unauthorized(INVALID_KEY_MESSAGE)

        return next(request)
