"""
=============================================================================
MUXSERVER: CUSTOM REQUEST ROUTING, ONE STEP AT A TIME
=============================================================================

A handful of tiny HTTP servers that build up request routing from the base
primitives:

    1. ServeMux          exact and subtree path patterns
    2. Response.text()   a wrapper that turns three writer calls into one
    3. Handler           one object that answers every request
    4. Router            ordered regex routes, captures in a RequestContext

=============================================================================
PROJECT STRUCTURE
=============================================================================

    muxserver/
    ├── __init__.py          # This file
    ├── __main__.py          # CLI: python -m muxserver <stage>
    ├── config.py            # ServerConfig
    ├── server.py            # HTTPServer, listen_and_serve
    ├── stages.py            # The four example applications
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # Buffered client connection
    ├── http/
    │   ├── request.py       # HTTPRequest, RequestParser
    │   ├── response.py      # ResponseWriter, HTTPResponse, Response
    │   ├── handler.py       # Handler protocol
    │   ├── mux.py           # ServeMux
    │   ├── context.py       # RequestContext
    │   ├── router.py        # Router, Route
    │   └── errors.py        # RouteConfigError
    └── middleware/
        └── logging.py       # Access log wrapper

=============================================================================
QUICK START
=============================================================================

    from muxserver import Router, ServerConfig, listen_and_serve

    router = Router()

    @router.route(r"^/hello$")
    def hello(ctx):
        ctx.text(200, "Hello world")

    @router.route(r"/hello/([\\w._-]+)$")
    def hello_name(ctx):
        ctx.text(200, f"Hello {ctx.captures[0]}")

    listen_and_serve(router, ServerConfig(port=9000))

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, listen_and_serve
from .http import (
    Handler,
    HTTPRequest,
    RequestContext,
    Response,
    ResponseWriter,
    Route,
    RouteConfigError,
    Router,
    ServeMux,
)

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "listen_and_serve",
    "Handler",
    "HTTPRequest",
    "RequestContext",
    "Response",
    "ResponseWriter",
    "Route",
    "RouteConfigError",
    "Router",
    "ServeMux",
    "__version__",
]
