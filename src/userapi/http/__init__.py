"""
=============================================================================
HTTP LAYER
=============================================================================

Everything between raw bytes and handler functions:

    request.py    bytes → HTTPRequest (RequestParser, HTTPParseError)
    response.py   HTTPResponse, ResponseBuilder and the status helpers
    router.py     (method, path) → handler, typed path parameters

Status codes come straight from the standard library's http.HTTPStatus,
which already carries the reason phrases used in status lines.

=============================================================================
"""

from http import HTTPStatus

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200
    created,             # 201
    no_content,          # 204
    bad_request,         # 400 {"error": ...}
    validation_failed,   # 400 {"errors": [...]}
    unauthorized,        # 401
    not_found,           # 404 (empty body)
    route_not_found,     # 404 (router)
    method_not_allowed,  # 405
    internal_error,      # 500
)
from .router import Router, Route, RouteMatch

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    "HTTPResponse",
    "ResponseBuilder",
    "HTTPStatus",

    "ok",
    "created",
    "no_content",
    "bad_request",
    "validation_failed",
    "unauthorized",
    "not_found",
    "route_not_found",
    "method_not_allowed",
    "internal_error",

    "Router",
    "Route",
    "RouteMatch",
]
