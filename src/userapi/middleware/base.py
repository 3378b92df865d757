"""
=============================================================================
MIDDLEWARE INTERFACE AND PIPELINE
=============================================================================

Every cross-cutting concern of the service is a middleware stage: a
callable that gets the request and the rest of the chain, and either
answers by itself (short-circuit) or delegates exactly once.

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                 │
    │   Request ──────────────────────────────────────────────►       │
    │                                                                 │
    │   ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌─────────┐   │
    │   │  Error   │───►│ API key  │───►│ Logging  │───►│ Router  │   │
    │   │ handling │    │   auth   │    │          │    │         │   │
    │   └────┬─────┘    └────┬─────┘    └────┬─────┘    └────┬────┘   │
    │        │               │               │               │        │
    │   try/except      401 if key      start timer      handler      │
    │                   missing/bad                                   │
    │                                                                 │
    │   ◄────────────────────────────────────────────── Response      │
    │                                                                 │
    │   500 on fault                    log line                      │
    │                                                                 │
    └─────────────────────────────────────────────────────────────────┘

The order is fixed when the pipeline is built; nothing reorders it at
request time.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The rest of the chain, as seen from one stage: the next middleware, or
# the router at the very end.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware stages.

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                if not self.is_allowed(request):
                    return unauthorized("...")     # short-circuit

                response = next(request)           # delegate, once

                response.set_header("X-Seen-By", self.name)
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The rest of the chain; call it at most once

        Returns:
            HTTP response, either from next() or short-circuited
        """
        pass

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler like layers of an onion.

        pipeline = MiddlewarePipeline()
        pipeline.add(ErrorHandlingMiddleware())    # first added = outermost
        pipeline.add(ApiKeyMiddleware(keys))
        pipeline.add(LoggingMiddleware())          # last added = innermost

        handler = pipeline.wrap(router.handle)
        response = handler(request)

    Request flows inward in the order added; the response flows back out
    in reverse.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Append a stage (first added = outermost).

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Add several stages at once, in order."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Compose every stage around handler into one callable.

        Given [A, B, C] and handler, the result is A(B(C(handler))):
        wrapping runs in reverse so the first-added stage ends up outermost.

        Args:
            handler: The final request handler, normally router.handle

        Returns:
            A single callable running the whole chain
        """
        current = handler

        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    @property
    def names(self) -> List[str]:
        """Stage names, outermost first."""
        return [mw.name for mw in self._middleware]

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
