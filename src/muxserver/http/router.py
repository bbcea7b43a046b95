"""
=============================================================================
REGEX ROUTER
=============================================================================

The last stop in the progression: an ordered list of regular expressions,
each paired with a handler that receives a RequestContext.

    router = Router()

    @router.route(r"^/hello$")
    def hello(ctx):
        ctx.text(200, "Hello world")

    @router.route(r"/hello/([\\w._-]+)$")
    def hello_name(ctx):
        ctx.text(200, f"Hello {ctx.captures[0]}")

=============================================================================
DISPATCH
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   DISPATCH FOR GET /hello/Patrick                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Routes (registration order = priority):                           │
    │                                                                      │
    │   0  ^/hello$              search("/hello/Patrick")  no             │
    │   1  /hello/([\\w._-]+)$    search("/hello/Patrick")  YES ← stop     │
    │                            groups() = ("Patrick",)                   │
    │                                                                      │
    │   hello_name(RequestContext(captures=("Patrick",)))                  │
    │                                                                      │
    │   Nothing matched?  →  default handler, captures=()                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

- First match wins. There is no "most specific" reordering, so a route
  registered after a broader one that matches the same paths is dead.
- Patterns are SEARCHED, not matched at position 0. Anchor with ^ and $
  when the whole path must match.
- A group that did not take part in the match (e.g. "(x)?") captures "".
- Exactly one handler runs per request.

=============================================================================
LIFECYCLE
=============================================================================

    setup (one thread)             serving (many threads)
    ──────────────────             ──────────────────────────────────
    register() / route()    ──►    dispatch() reads the route tuple
    bad pattern → error            first dispatch seals the router;
    before the server starts       register() now raises

The route table is a tuple that is replaced, never mutated, so workers read
it without a lock.

=============================================================================
INTERVIEW QUESTIONS ABOUT ROUTING
=============================================================================

Q: "What's the cost of a linear regex scan?"
A: "O(R × P): R routes, each a regex over a path of length P. Fine for
   tens of routes. Radix trees get lookup to O(P) but give up arbitrary
   regexes."

Q: "Why fail at registration instead of at request time?"
A: "A broken pattern is a programming error. Failing before the socket is
   bound means the process never serves with half a route table."

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import logging
import re

from .context import RequestContext
from .errors import RouteConfigError
from .handler import Handler
from .request import HTTPRequest
from .response import ResponseWriter


logger = logging.getLogger(__name__)


# Route handlers take the context, not (writer, request)
ContextHandler = Callable[[RequestContext], None]


def not_found(ctx: RequestContext) -> None:
    """Default handler: 404 with body "Not found"."""
    ctx.text(404, "Not found")


@dataclass(frozen=True)
class Route:
    """
    One registered (pattern, handler) pair.

    Attributes:
        pattern: The compiled regular expression.
        handler: Called with a RequestContext when the pattern matches.
    """

    pattern: re.Pattern
    handler: ContextHandler

    @property
    def source(self) -> str:
        """The pattern text as registered."""
        return self.pattern.pattern

    def match(self, path: str) -> Optional[Tuple[str, ...]]:
        """
        Search ``path`` for this route's pattern.

        Returns:
            The captures (possibly empty) on a match, None otherwise.
        """
        found = self.pattern.search(path)
        if found is None:
            return None
        return tuple(group if group is not None else "" for group in found.groups())


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of a successful lookup.

    Example:
        Pattern:  /hello/([\\w._-]+)$
        Path:     /hello/Patrick
        Result:   RouteMatch(route=<Route>, captures=("Patrick",))
    """

    route: Route
    captures: Tuple[str, ...]


class Router(Handler):
    """
    Ordered regex router with a fallback handler.

    Args:
        default_handler: Runs when no route matches. Defaults to not_found
                         (404 "Not found").

    A Router is a Handler, so it can be served directly:

        server = HTTPServer(router)
    """

    def __init__(self, default_handler: Optional[ContextHandler] = None):
        if default_handler is not None and not callable(default_handler):
            raise RouteConfigError(f"Default handler {default_handler!r} is not callable")

        self.default_handler: ContextHandler = default_handler or not_found
        self._routes: Tuple[Route, ...] = ()
        self._sealed = False

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, pattern: str, handler: ContextHandler) -> Route:
        """
        Compile ``pattern`` and append it to the route table.

        Args:
            pattern: Regular expression searched against the request path.
            handler: Function taking a RequestContext.

        Returns:
            The new Route.

        Raises:
            RouteConfigError: The pattern does not compile, the handler is
                              not callable, or the router is already serving.
        """
        if self._sealed:
            raise RouteConfigError(
                f"Cannot register {pattern!r}: router is already serving requests",
                pattern,
            )

        if not callable(handler):
            raise RouteConfigError(
                f"Handler for {pattern!r} is not callable: {handler!r}", pattern
            )

        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise RouteConfigError(f"Invalid route pattern {pattern!r}: {e}", pattern) from e

        route = Route(pattern=compiled, handler=handler)
        self._routes = self._routes + (route,)

        logger.debug(f"Registered route #{len(self._routes) - 1}: {pattern}")
        return route

    def route(self, pattern: str) -> Callable[[ContextHandler], ContextHandler]:
        """
        Decorator form of register().

            @router.route(r"^/hello$")
            def hello(ctx):
                ctx.text(200, "Hello world")
        """
        def decorator(handler: ContextHandler) -> ContextHandler:
            self.register(pattern, handler)
            return handler  # Unchanged, so decorators can stack
        return decorator

    @property
    def routes(self) -> Tuple[Route, ...]:
        """Registered routes in priority order."""
        return self._routes

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Refuse further registrations. Called on the first dispatch."""
        self._sealed = True

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def match(self, path: str) -> Optional[RouteMatch]:
        """
        Find the first route whose pattern is found in ``path``.

        Returns:
            RouteMatch, or None if no route matches.
        """
        for route in self._routes:
            captures = route.match(path)
            if captures is not None:
                return RouteMatch(route=route, captures=captures)
        return None

    def dispatch(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        """
        Run exactly one handler for the request.

        The first matching route's handler gets a context carrying its
        captures; if none matches, the default handler gets empty captures.
        """
        if not self._sealed:
            self.seal()

        found = self.match(request.path)

        if found is None:
            logger.debug(f"No route for {request.path}")
            self.default_handler(RequestContext(request, writer))
            return

        logger.debug(f"{request.path} matched {found.route.source} captures={found.captures}")
        found.route.handler(RequestContext(request, writer, found.captures))

    def serve_http(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        self.dispatch(writer, request)

    # =========================================================================
    # UTILITY
    # =========================================================================

    def print_routes(self) -> None:
        """
        Print the route table (used by the CLI banner).

        Example output:
            Registered Routes:
            ------------------------------------------------------------
              0  ^/hello$                        hello
              1  /hello/([\\w._-]+)$              hello_name
              -  (default)                       not_found
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for index, route in enumerate(self._routes):
            print(f"  {index:<2} {route.source:<32} {_handler_name(route.handler)}")
        print(f"  {'-':<2} {'(default)':<32} {_handler_name(self.default_handler)}")
        print("-" * 60)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", type(handler).__name__)
