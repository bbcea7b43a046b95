"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and application code:

    request.py    bytes → HTTPRequest (RequestParser)
    response.py   ResponseWriter → HTTPResponse → bytes; Response wrapper
    handler.py    the handler protocol (functions or serve_http objects)
    mux.py        ServeMux: exact and subtree path patterns
    context.py    RequestContext for regex route handlers
    router.py     Router: ordered regex routes with captures
    errors.py     RouteConfigError

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    Response,
    ResponseWriter,
    format_http_date,
    reason_phrase,
    write_text,
)
from .handler import Handler, HandlerFunc, resolve_handler
from .errors import RouteConfigError
from .mux import ServeMux
from .context import RequestContext
from .router import Router, Route, RouteMatch, ContextHandler, not_found


__all__ = [
    # Request
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    # Response
    "HTTPResponse",
    "Response",
    "ResponseWriter",
    "format_http_date",
    "reason_phrase",
    "write_text",
    # Handlers
    "Handler",
    "HandlerFunc",
    "resolve_handler",
    # Routing
    "RouteConfigError",
    "ServeMux",
    "RequestContext",
    "Router",
    "Route",
    "RouteMatch",
    "ContextHandler",
    "not_found",
]
