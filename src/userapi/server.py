"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport to the request pipeline.

    ┌─────────────────────────────────────────────────────────────────┐
    │                          HTTPServer                             │
    │                                                                 │
    │   SocketServer ──accept──► Connection ──submit──► ThreadPool    │
    │                                                      │          │
    │                      worker thread, per request:     ▼          │
    │                                                                 │
    │   read_request() ─► RequestParser ─► MiddlewarePipeline ─►      │
    │                                      Router ─► handler          │
    │                                                                 │
    │   response.to_bytes() ─► send_response() ─► keep-alive / close  │
    └─────────────────────────────────────────────────────────────────┘

Errors the pipeline never sees are answered here:

    malformed request        400 / 405 / 413 / 505 + Connection: close
    first request too slow   408
    worker pool saturated    503

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    Router, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    Threaded HTTP/1.1 server with a middleware pipeline and a router.

        server = HTTPServer(ServerConfig(port=8080))

        @server.get("/api/users")
        def list_users(request):
            return ok([...])

        server.use(ErrorHandlingMiddleware())
        server.run()                        # blocks until SIGINT/SIGTERM or stop()

    Handlers and middleware can be called without sockets through
    build_handler(), which is what the unit tests do.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._router = Router()
        self._middleware = MiddlewarePipeline()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Append a middleware stage (first added = outermost).

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def route(self, path: str, method: Optional[str] = None, **kwargs):
        return self._router.route(path, method, **kwargs)

    def get(self, path: str, **kwargs):
        return self._router.get(path, **kwargs)

    def post(self, path: str, **kwargs):
        return self._router.post(path, **kwargs)

    def put(self, path: str, **kwargs):
        return self._router.put(path, **kwargs)

    def delete(self, path: str, **kwargs):
        return self._router.delete(path, **kwargs)

    def build_handler(self) -> Callable[[HTTPRequest], HTTPResponse]:
        """The middleware chain composed around router.handle."""
        return self._middleware.wrap(self._router.handle)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Serve until stopped (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._running = True
        self._setup_logging()
        self._handler = self.build_handler()
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )
        logger.info(f"Middleware: {' -> '.join(self._middleware.names) or '(none)'}")
        for line in self._router.describe():
            logger.info(f"Route: {line}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask a running server to shut down; run() returns shortly after."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        logging.getLogger("userapi").setLevel(level)

    def _shutdown(self):
        """Stop taking work, let in-flight requests finish, stop the workers."""
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a new connection to the pool, or turn it away with 503."""
        submitted = self._thread_pool.submit(self._process_connection, args=(conn,))

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Keep-alive loop for one connection (runs in a worker thread).

        read → parse → pipeline → send, repeated until the client or the
        config asks to close.
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                    if raw_request is None:
                        break

                    request = self._parser.parse(raw_request, conn.address)
                    response = self._dispatch(conn, request)

                    keep_alive = request.is_keep_alive and self.config.keep_alive
                    if keep_alive:
                        response.headers.setdefault("Connection", "keep-alive")
                        response.headers.setdefault(
                            "Keep-Alive",
                            f"timeout={int(self.config.keep_alive_timeout)}"
                        )
                    else:
                        response.headers["Connection"] = "close"

                    if not conn.send_response(response.to_bytes(self.config.server_name)):
                        break
                    if not keep_alive:
                        break

                    conn.set_keep_alive()

                except HTTPParseError as e:
                    self._send_error(conn, e.status_code, str(e))
                    break

                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break

                except Exception as e:
                    logger.exception(f"[{conn.id}] Connection error: {e}")
                    break

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        """Run the pipeline; a fault escaping it still becomes a 500."""
        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return internal_error()

    def _send_error(self, conn: Connection, status: int, message: str):
        """Answer a request that never reached the pipeline."""
        response = (ResponseBuilder()
            .status(HTTPStatus(status))
            .json({"error": message})
            .close_connection()
            .build())
        conn.send_response(response.to_bytes(self.config.server_name))
