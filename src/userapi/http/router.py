"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler and extracts typed path parameters.

Pattern segments:

    users            static, exact match
    {id}             one segment, passed to the handler as a string
    {id:int}         one segment of digits, passed as an int
    :id              same as {id}

Routes are compiled to anchored regexes with named groups:

    /api/users/{id:int}   →   ^/api/users/(?P<id>-?\\d+)$

A typed parameter is part of the pattern, so "/api/users/abc" simply
matches no route and gets the router's 404; the handler never sees a
value it cannot use.

    ┌────────────────────────────────────────────────────────────────┐
    │  GET /api/users/7                                              │
    │       │                                                        │
    │       ▼                                                        │
    │  match("GET", "/api/users/7")                                  │
    │       ├── route found  → request.path_params = {"id": 7}       │
    │       │                  → handler(request)                    │
    │       ├── path known under another method → 405 + Allow        │
    │       └── nothing      → 404 {"error": "No route matches ..."} │
    └────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List, Tuple
import re

from .request import HTTPRequest
from .response import HTTPResponse, route_not_found, method_not_allowed


Handler = Callable[[HTTPRequest], HTTPResponse]


# =============================================================================
# PARAMETER CONVERTERS
# =============================================================================
# name → (regex for one segment, function converting the captured text)

CONVERTERS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "str": (r"[^/]+", str),
    "int": (r"-?\d+", int),
}

_BRACE_SEGMENT = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<type>[a-z]+))?\}$")


@dataclass
class Route:
    """
    A registered route.

        Route(path="/api/users/{id:int}", method="GET", handler=get_user,
              name="get_user", _converters={"id": int})
    """

    path: str
    method: Optional[str]            # None = any method
    handler: Handler
    name: Optional[str] = None

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _converters: Dict[str, Callable[[str], Any]] = field(default_factory=dict, repr=False)

    def match_path(self, path: str) -> Optional[Dict[str, Any]]:
        """Converted path parameters if path fits this route's pattern."""
        if self._pattern is None:
            return None
        match = self._pattern.match(path)
        if not match:
            return None
        params: Dict[str, Any] = {}
        for name, raw in match.groupdict().items():
            try:
                params[name] = self._converters[name](raw)
            except ValueError:
                return None
        return params


@dataclass
class RouteMatch:
    """The matched route plus its converted parameters."""
    route: Route
    params: Dict[str, Any]


class Router:
    """
    HTTP request router.

    Routes are tried in registration order; the first match wins.

        router = Router()

        @router.get("/api/users/{id:int}", name="get_user")
        def get_user(request):
            user_id = request.path_params["id"]     # already an int
            ...

        router.url_for("get_user", id=7)            # "/api/users/7"
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._named_routes: Dict[str, Route] = {}

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern, e.g. "/api/users/{id:int}"
            handler: Callable taking the request and returning a response
            method: HTTP method, or None for any method
            name: Optional name for url_for()

        Returns:
            The registered Route.

        Raises:
            ValueError: If the pattern uses an unknown converter.
        """
        pattern, converters = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name,
            _pattern=pattern,
            _converters=converters,
        )
        self._routes.append(route)

        if name:
            self._named_routes[name] = route

        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, Dict[str, Callable[[str], Any]]]:
        """
        Compile a route pattern.

            "/api/users/{id:int}"
                → ^/api/users/(?P<id>-?\\d+)$ , {"id": int}
        """
        converters: Dict[str, Callable[[str], Any]] = {}
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            brace = _BRACE_SEGMENT.match(segment)
            if brace:
                param_name = brace.group("name")
                type_name = brace.group("type") or "str"
                if type_name not in CONVERTERS:
                    raise ValueError(f"Unknown route parameter type '{type_name}' in {path}")
                segment_regex, convert = CONVERTERS[type_name]
                converters[param_name] = convert
                regex_parts.append(f"(?P<{param_name}>{segment_regex})")
            elif segment.startswith(":"):
                param_name = segment[1:]
                converters[param_name] = str
                regex_parts.append(f"(?P<{param_name}>[^/]+)")
            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # root route
        regex_parts.append("$")

        return re.compile("".join(regex_parts)), converters

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    @staticmethod
    def _normalize(path: str) -> str:
        """Leading slash, no trailing slash: "/api/users/" → "/api/users"."""
        return "/" + path.strip("/") if path != "/" else "/"

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """First route matching method and path, or None."""
        path = self._normalize(path)

        for route in self._routes:
            if route.method and route.method != method.upper():
                continue
            params = route.match_path(path)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path; feeds the Allow header of a 405."""
        path = self._normalize(path)
        methods = set()

        for route in self._routes:
            if route.match_path(path) is not None:
                if route.method:
                    methods.add(route.method)
                else:
                    return ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request: handler response, 405 or 404.

        This is the innermost callable that MiddlewarePipeline.wrap() wraps.
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return route_not_found(request.path)

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(); returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "POST", name)

    def put(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "PUT", name)

    def delete(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(path, "DELETE", name)

    # =========================================================================
    # UTILITIES
    # =========================================================================

    def url_for(self, name: str, **params: Any) -> Optional[str]:
        """
        Build the URL of a named route.

            router.url_for("get_user", id=7)  →  "/api/users/7"

        Returns None for an unknown name.
        """
        route = self._named_routes.get(name)
        if not route:
            return None

        def substitute(segment: str) -> str:
            brace = _BRACE_SEGMENT.match(segment)
            if brace and brace.group("name") in params:
                return str(params[brace.group("name")])
            if segment.startswith(":") and segment[1:] in params:
                return str(params[segment[1:]])
            return segment

        return "/".join(substitute(segment) for segment in route.path.split("/"))

    def routes(self) -> List[Route]:
        return list(self._routes)

    def describe(self) -> List[str]:
        """One "METHOD  path" line per route, for the startup log."""
        return [f"{route.method or 'ANY':8} {route.path}" for route in self._routes]
