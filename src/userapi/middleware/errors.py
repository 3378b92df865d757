"""
Error containment.

The outermost stage. Whatever escapes the rest of the chain (a bug in a
handler, a store failure, a fault in another middleware) ends here as a
logged traceback and a generic 500:

    HTTP/1.1 500 Internal Server Error
    Content-Type: application/json; charset=utf-8

    {"error": "Internal server error."}

The response body never carries exception details; those go to the log.
"""

import logging

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, internal_error


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


class ErrorHandlingMiddleware(Middleware):
    """
    Turn unhandled exceptions into a 500 response.

    Usage:
        pipeline.add(ErrorHandlingMiddleware())   # add it first
    """

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        self.message = message

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        try:
            return next(request)
        except Exception as e:
            # logger.exception records the traceback; the formatter adds the timestamp
            logger.exception(
                f"Unhandled error for {request.method} {request.path}: {e}"
            )
            return internal_error(self.message)
