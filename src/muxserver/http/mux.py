"""
=============================================================================
SERVE MUX: THE BUILT-IN STYLE MULTIPLEXER
=============================================================================

The first stop in the progression. Before writing a router we use the kind
of multiplexer most standard libraries ship: a table from path patterns to
handlers with two pattern flavours.

=============================================================================
PATTERN RULES
=============================================================================

    Pattern      Kind       Matches
    ─────────    ───────    ─────────────────────────────────────────────
    /hello       exact      /hello only
    /hello/      subtree    /hello/, /hello/Patrick, /hello/a/b/c
    /            subtree    everything no other pattern claims

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      LOOKUP FOR /hello/Patrick                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Exact table:    "/hello/Patrick" registered?     no            │
    │                                                                      │
    │   2. Subtrees, longest first:                                        │
    │         "/hello/"   prefix of path?                   YES ← wins    │
    │         "/"         (never reached)                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Longest pattern wins, so registration order does not matter here. That is
the main thing the regex Router later does differently.

One convenience: if only "/hello/" is registered, a request for "/hello"
is redirected (301) to "/hello/" instead of falling through to "/".

Paths are cleaned before lookup: "//hello/Patrick" and "/x/../hello/Patrick"
both answer 301 with Location "/hello/Patrick". Handlers only ever see
clean paths.

=============================================================================
LIMITS (what pushes us to write a Router)
=============================================================================

- No captures: handlers slice the path themselves, e.g.
      name = request.path.replace("/hello/", "", 1)
  which happily yields "" for a bare "/hello/".
- No patterns inside a segment: "/users/{id}/posts" cannot be expressed.

=============================================================================
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import threading

from .errors import RouteConfigError
from .handler import Handler, HandlerFunc, resolve_handler
from .request import HTTPRequest
from .response import ResponseWriter


logger = logging.getLogger(__name__)


def not_found_handler(writer: ResponseWriter, request: HTTPRequest) -> None:
    """The multiplexer's reply when no pattern matches."""
    writer.headers["Content-Type"] = "text/plain; charset=utf-8"
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(404)
    writer.write("404 page not found\n")


def clean_path(path: str) -> str:
    """
    Canonical form of a URL path.

    Collapses repeated slashes, drops "." segments and resolves ".."
    against the segment before it (never above the root). A trailing
    slash is kept.

        clean_path("//hello/Patrick")      → "/hello/Patrick"
        clean_path("/x/../hello/")         → "/hello/"
        clean_path("/../..")                → "/"
    """
    segments: List[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)

    cleaned = "/" + "/".join(segments)
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned


def redirect_handler(location: str, status: int = 301) -> HandlerFunc:
    """Build a handler that redirects every request to ``location``."""

    def redirect(writer: ResponseWriter, request: HTTPRequest) -> None:
        writer.headers["Location"] = location
        if request.method in ("GET", "HEAD"):
            writer.headers["Content-Type"] = "text/html; charset=utf-8"
        writer.write_header(status)
        if request.method == "GET":
            writer.write(f'<a href="{location}">Moved Permanently</a>.\n\n')

    return redirect


class ServeMux(Handler):
    """
    Path multiplexer with exact and subtree patterns.

    Usage:
        mux = ServeMux()

        @mux.route("/hello")
        def hello(writer, request):
            ...

        mux.handle("/hello/", HelloName())   # Handler objects work too

        server = HTTPServer(mux)

    Registration and lookup share a lock, so handlers may be added while
    the server is running.
    """

    def __init__(self):
        self._exact: Dict[str, HandlerFunc] = {}
        # Subtree patterns ("/x/"), kept sorted longest first
        self._subtrees: List[Tuple[str, HandlerFunc]] = []
        self._lock = threading.Lock()

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def handle(self, pattern: str, handler: Any) -> None:
        """
        Register a handler for a pattern.

        Args:
            pattern: "/exact/path" or "/subtree/" (trailing slash).
            handler: Handler object or function (writer, request).

        Raises:
            RouteConfigError: Empty pattern, pattern without a leading "/",
                              missing handler, or duplicate pattern.
        """
        if not pattern:
            raise RouteConfigError("Invalid pattern: empty", pattern)
        if not pattern.startswith("/"):
            raise RouteConfigError(
                f"Invalid pattern {pattern!r}: must start with '/'", pattern
            )
        if handler is None:
            raise RouteConfigError(f"Nil handler for pattern {pattern!r}", pattern)

        try:
            func = resolve_handler(handler)
        except TypeError as e:
            raise RouteConfigError(str(e), pattern) from e

        with self._lock:
            if pattern in self._exact:
                raise RouteConfigError(
                    f"Multiple registrations for {pattern}", pattern
                )
            self._exact[pattern] = func

            if pattern.endswith("/"):
                self._subtrees.append((pattern, func))
                self._subtrees.sort(key=lambda entry: len(entry[0]), reverse=True)

        logger.debug(f"ServeMux registered {pattern}")

    def handle_func(self, pattern: str, func: HandlerFunc) -> None:
        """Register a plain function. Same as handle()."""
        self.handle(pattern, func)

    def route(self, pattern: str) -> Callable[[HandlerFunc], HandlerFunc]:
        """
        Decorator form of handle().

            @mux.route("/hello")
            def hello(writer, request):
                ...
        """
        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.handle(pattern, func)
            return func
        return decorator

    @property
    def patterns(self) -> List[str]:
        """Registered patterns, sorted."""
        with self._lock:
            return sorted(self._exact)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def _match(self, path: str) -> Tuple[Optional[HandlerFunc], str]:
        """Exact match first, then the longest subtree prefix."""
        func = self._exact.get(path)
        if func is not None:
            return func, path

        for pattern, func in self._subtrees:
            if path.startswith(pattern):
                return func, pattern

        return None, ""

    def _should_redirect(self, path: str) -> bool:
        """True if "/x" is unregistered but subtree "/x/" is."""
        if path in self._exact or path.endswith("/"):
            return False
        return path + "/" in self._exact

    def handler_for(self, request: HTTPRequest) -> Tuple[HandlerFunc, str]:
        """
        Pick the handler for a request.

        Returns:
            (handler, matched pattern). The pattern is "" when the request is
            answered by the redirect or not-found handler.
        """
        path = request.path
        if request.method != "CONNECT":
            path = clean_path(path)

        with self._lock:
            if self._should_redirect(path):
                location = path + "/"
            elif path != request.path:
                location = path
            else:
                location = ""

            if location:
                if request.raw_query:
                    location += "?" + request.raw_query
                return redirect_handler(location), ""

            func, pattern = self._match(path)

        if func is None:
            return not_found_handler, ""
        return func, pattern

    def serve_http(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        """Dispatch the request to the handler for its path."""
        func, pattern = self.handler_for(request)
        logger.debug(f"ServeMux {request.path} -> {pattern or '(none)'}")
        func(writer, request)
