"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler.

    GET    /users       → list_users
    GET    /users/:id   → get_user        "/users/3" → path_params={"id": "3"}
    POST   /users       → create_user
    PUT    /users/:id   → update_user
    DELETE /users/:id   → delete_user

Patterns are compiled to anchored regexes once, at registration:

    "/users/:id"  →  ^/users/(?P<id>[^/]+)$

First registered, first matched. A path that exists under another method
answers 405 with an Allow header; an unknown path answers 404.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, Any, List
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """A URL pattern bound to a handler."""

    path: str                        # URL pattern (e.g., /users/:id)
    method: str
    handler: Handler
    name: Optional[str] = None       # for url_for()

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """A matched route plus the path parameters it captured."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    Request router with ":param" path segments.

        router = Router()
        router.add_route("/users/:id", get_user, method="GET", name="get_user")

        router.url_for("get_user", id=3)   # "/users/3"
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._named_routes: Dict[str, Route] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: str,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a handler for a path pattern.

        Args:
            path: URL pattern (e.g., /users/:id)
            handler: Callable taking a request and returning a response
            method: HTTP method
            name: Optional route name for url_for()

        Returns:
            The registered Route.
        """
        pattern = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper(),
            handler=handler,
            name=name,
            _pattern=pattern,
        )

        self._routes.append(route)
        if name:
            self._named_routes[name] = route

        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile "/users/:id" into ^/users/(?P<id>[^/]+)$.

        ":name" captures one segment, anything else must match literally.
        """
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                regex_parts.append(f"(?P<{param_name}>[^/]+)")
            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")

        regex_parts.append("$")
        return re.compile("".join(regex_parts))

    # =========================================================================
    # MATCHING
    # =========================================================================

    @staticmethod
    def _normalize(path: str) -> str:
        # "/users/" and "/users" are the same resource
        return "/" + path.strip("/") if path != "/" else "/"

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """First route matching method and path, or None."""
        path = self._normalize(path)

        for route in self._routes:
            if route.method != method.upper():
                continue

            match = route._pattern.match(path) if route._pattern else None
            if match:
                return RouteMatch(route=route, params=match.groupdict())

        return None

    def get_allowed_methods(self, path: str) -> List[str]:
        """Methods registered for a path, for the 405 Allow header."""
        path = self._normalize(path)
        methods = set()

        for route in self._routes:
            if route._pattern and route._pattern.match(path):
                methods.add(route.method)

        return sorted(methods)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        Path parameters are stored on request.path_params before the handler
        runs. Exceptions from the handler propagate to the caller.
        """
        match = self.match(request.method, request.path)

        if match:
            request.path_params = match.params
            return match.route.handler(request)

        allowed = self.get_allowed_methods(request.path)
        if allowed:
            return method_not_allowed(allowed)

        return not_found(f"No route matches {request.path}")

    # =========================================================================
    # UTILITIES
    # =========================================================================

    def url_for(self, name: str, **params: Any) -> Optional[str]:
        """
        Build a URL from a named route.

            router.url_for("get_user", id=3)   # "/users/3"

        Returns None for an unknown name.
        """
        route = self._named_routes.get(name)
        if not route:
            return None

        url = route.path
        for param_name, value in params.items():
            url = url.replace(f":{param_name}", str(value))

        return url

    def describe_routes(self) -> List[str]:
        """One "METHOD  /path" line per route, for the startup log."""
        return [f"{route.method:8} {route.path}" for route in self._routes]
