"""
=============================================================================
REQUEST LOGGING MIDDLEWARE
=============================================================================

One access-log line per request that gets past authentication:

    text:  127.0.0.1 "POST /api/users" 201 74B 1.38ms [id=3f9c2a1b]
    json:  {"request_id": "3f9c2a1b", "method": "POST", "path": "/api/users",
            "status_code": 201, "content_length": 74, "duration_ms": 1.38, ...}

Lines go to the "userapi.access" logger, so they can be routed or
silenced separately from the application loggers:

    logging.getLogger("userapi.access").setLevel(logging.WARNING)

This stage sits innermost, right in front of the router. It does not
catch exceptions: a fault propagates untouched to ErrorHandlingMiddleware,
which logs it once with its traceback.

=============================================================================
"""

from dataclasses import dataclass, asdict
import json
import logging
import time
import uuid

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("userapi.access")

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestLog:
    """Structured access-log entry."""

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip or "-"} "{self.method} {target}" {self.status_code} '
            f'{self.content_length}B {self.duration_ms:.2f}ms [id={self.request_id}]'
        )


class LoggingMiddleware(Middleware):
    """
    Time the rest of the chain and log the outcome.

    Usage:
        pipeline.add(LoggingMiddleware())                    # text lines
        pipeline.add(LoggingMiddleware(log_format="json"))   # one JSON object per line
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
    ):
        """
        Args:
            log_format: "text" (human readable) or "json" (machine parseable)
            include_request_id: Add an X-Request-ID header to the response
            log_level: Level the access lines are logged at
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {log_format!r}")
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        # 8 hex chars are enough to correlate a client report with a log line
        request_id = uuid.uuid4().hex[:8]
        method, path = request.method, request.path
        start_time = time.perf_counter()

        response = next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        entry = RequestLog(
            request_id=request_id,
            method=method,
            path=path,
            query=self._query_string(request),
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        if self.include_request_id:
            response.headers[REQUEST_ID_HEADER] = request_id

        return response

    @staticmethod
    def _query_string(request: HTTPRequest) -> str:
        return "&".join(
            f"{name}={value}"
            for name, values in request.query_params.items()
            for value in values
        )
