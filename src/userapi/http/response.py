"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

HTTPResponse is the value every handler and middleware stage returns.
ResponseBuilder gives handlers a fluent way to make one, and the helper
functions at the bottom cover the responses the user API actually sends:

    ok(users)                         200  JSON array / object / text
    created(user, "/api/users/1")     201  JSON + Location
    no_content()                      204  empty
    bad_request("...")                400  {"error": "..."}
    validation_failed([...])          400  {"errors": [...]}
    unauthorized("...")               401  {"error": "..."}
    not_found()                       404  empty
    method_not_allowed([...])         405  {"error": ..., "allowed": [...]} + Allow
    internal_error("...")             500  {"error": "..."}

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from http import HTTPStatus
from typing import Optional, Dict, Any, Union
import json


JSON_CONTENT_TYPE = "application/json; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be serialized onto the socket.

        HTTPResponse(status=201, headers={...}, body=b"...")
            │
            ▼ to_bytes()
        b"HTTP/1.1 201 Created\\r\\nContent-Type: ...\\r\\n\\r\\n{...}"
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        status = HTTPStatus(self.status)
        return f"{self.version} {status.value} {status.phrase}"

    @property
    def json(self) -> Any:
        """Decoded JSON body, or None when the body is empty."""
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self, server_name: str = "UserAPI/1.0") -> bytes:
        """
        Serialize for socket.sendall().

        Content-Length, Date and Server are filled in unless already set.
        """
        response_headers = dict(self.headers)
        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .header("Location", "/api/users/1")
            .json(user.to_dict())
            .build())

    Every method except build() returns the builder.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Raw body; strings are encoded as UTF-8."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str, content_type: str = TEXT_CONTENT_TYPE) -> "ResponseBuilder":
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def json(self, data: Any, pretty: bool = False) -> "ResponseBuilder":
        """
        Serialize data as the JSON body.

        ensure_ascii=False keeps non-ASCII names readable on the wire
        (the body is UTF-8 either way).
        """
        indent = 2 if pretty else None
        self._body = json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def close_connection(self) -> "ResponseBuilder":
        """Ask the client to close the connection after this response."""
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """RFC 7231 HTTP-date, e.g. "Wed, 01 Jan 2026 12:00:00 GMT"."""
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    200 OK.

    dict/list bodies become JSON, str becomes text/plain, bytes are sent as-is.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)

    if isinstance(body, (dict, list)):
        builder.json(body)
    elif isinstance(body, str):
        builder.text(body, content_type or TEXT_CONTENT_TYPE)
    else:
        builder.body(body)
        if content_type:
            builder.content_type(content_type)

    return builder.build()


def created(body: Union[dict, list], location: Optional[str] = None) -> HTTPResponse:
    """201 Created with a JSON body and, if given, a Location header."""
    builder = ResponseBuilder().status(HTTPStatus.CREATED).json(body)
    if location:
        builder.header("Location", location)
    return builder.build()


def no_content() -> HTTPResponse:
    """204 No Content."""
    return ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400 with {"error": message}."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).json({"error": message}).build()


def validation_failed(errors: list[str]) -> HTTPResponse:
    """400 with the full, ordered list of validation messages."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).json({"errors": list(errors)}).build()


def unauthorized(message: str = "Unauthorized") -> HTTPResponse:
    """401 with {"error": message}."""
    return ResponseBuilder().status(HTTPStatus.UNAUTHORIZED).json({"error": message}).build()


def not_found() -> HTTPResponse:
    """404 with an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def route_not_found(path: str) -> HTTPResponse:
    """404 produced by the router when no route pattern matches."""
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_FOUND)
        .json({"error": f"No route matches {path}"})
        .build())


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """405 with the Allow header RFC 7231 requires."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def internal_error(message: str = "Internal server error.") -> HTTPResponse:
    """500 with a generic message. Never put exception details in here."""
    return (ResponseBuilder()
        .status(HTTPStatus.INTERNAL_SERVER_ERROR)
        .json({"error": message})
        .build())
