"""
Middleware stages and the pipeline that composes them.

The service installs them in this order (outermost first):

    ErrorHandlingMiddleware   unhandled exception → 500
    ApiKeyMiddleware          X-API-Key check    → 401
    LoggingMiddleware         one access-log line per request
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .errors import ErrorHandlingMiddleware
from .auth import ApiKeyMiddleware, is_public_path
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "ErrorHandlingMiddleware",
    "ApiKeyMiddleware",
    "is_public_path",
    "LoggingMiddleware",
    "RequestLog",
]
