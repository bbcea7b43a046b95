"""
=============================================================================
THE FOUR EXAMPLE SERVERS
=============================================================================

Each stage builds the same little "hello" application a different way.
Run any of them with ``python -m muxserver <stage>``.

    ┌───────────┬────────────────────────────────────────────────────────┐
    │ stage     │ what it shows                                          │
    ├───────────┼────────────────────────────────────────────────────────┤
    │ servemux  │ ServeMux + raw writer calls (header, status, body)     │
    │ response  │ ServeMux + Response wrapper with text()                │
    │ handler   │ one Handler object answering every request             │
    │ router    │ regex Router + RequestContext with captures            │
    └───────────┴────────────────────────────────────────────────────────┘

Routes served by servemux, response and router:

    GET /hello            200 "Hello world\\n"
    GET /hello/Patrick    200 "Hello Patrick\\n"
    GET /anything-else    404 "Not found\\n"

=============================================================================
THE EMPTY NAME
=============================================================================

The ServeMux stages find the name by deleting the first "/hello/" from the
path. A bare "/hello/" therefore greets nobody: 200 "Hello \\n". That is
kept on purpose; it is the gap the regex router closes, since
``[\\w._-]+`` needs at least one character and "/hello/" falls through to
404 there.

=============================================================================
"""

from typing import Callable, Dict

from .http import (
    Handler,
    HTTPRequest,
    RequestContext,
    Response,
    ResponseWriter,
    Router,
    ServeMux,
)


HELLO_PREFIX = "/hello/"


def _name_from_path(path: str) -> str:
    """Remove the first "/hello/" in the path, wherever it is."""
    return path.replace(HELLO_PREFIX, "", 1)


# =============================================================================
# STAGE 1: SERVEMUX WITH RAW WRITER CALLS
# =============================================================================

def build_servemux_app() -> ServeMux:
    """ServeMux with raw header, status and body writes."""
    mux = ServeMux()

    @mux.route("/hello/")
    def hello_name(writer: ResponseWriter, request: HTTPRequest) -> None:
        name = _name_from_path(request.path)

        writer.headers["Content-Type"] = "text/plain"
        writer.write_header(200)
        writer.write(f"Hello {name}\n")

    @mux.route("/hello")
    def hello(writer: ResponseWriter, request: HTTPRequest) -> None:
        writer.headers["Content-Type"] = "text/plain"
        writer.write_header(200)
        writer.write("Hello world\n")

    @mux.route("/")
    def fallback(writer: ResponseWriter, request: HTTPRequest) -> None:
        writer.headers["Content-Type"] = "text/plain"
        writer.write_header(404)
        writer.write("Not found\n")

    return mux


# =============================================================================
# STAGE 2: SERVEMUX WITH THE RESPONSE WRAPPER
# =============================================================================

def build_response_app() -> ServeMux:
    """ServeMux whose handlers reply through Response.text()."""
    mux = ServeMux()

    @mux.route("/hello/")
    def hello_name(writer: ResponseWriter, request: HTTPRequest) -> None:
        Response(writer).text(200, f"Hello {_name_from_path(request.path)}")

    @mux.route("/hello")
    def hello(writer: ResponseWriter, request: HTTPRequest) -> None:
        Response(writer).text(200, "Hello world")

    @mux.route("/")
    def fallback(writer: ResponseWriter, request: HTTPRequest) -> None:
        Response(writer).text(404, "Not found")

    return mux


# =============================================================================
# STAGE 3: A CUSTOM HANDLER OBJECT
# =============================================================================

class HelloApp(Handler):
    """Answers every request, whatever the path, with "Hello world"."""

    def serve_http(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        writer.headers["Content-Type"] = "text/plain"
        writer.write_header(200)
        writer.write("Hello world\n")


def build_handler_app() -> HelloApp:
    """One handler object answering every path with Hello world."""
    return HelloApp()


# =============================================================================
# STAGE 4: REGEX ROUTER WITH A REQUEST CONTEXT
# =============================================================================

def build_router_app() -> Router:
    """Regex router passing captures through a RequestContext."""
    router = Router()

    @router.route(r"^/hello$")
    def hello(ctx: RequestContext) -> None:
        ctx.text(200, "Hello world")

    @router.route(r"/hello/([\w._-]+)$")
    def hello_name(ctx: RequestContext) -> None:
        ctx.text(200, f"Hello {ctx.captures[0]}")

    return router


STAGES: Dict[str, Callable[[], Handler]] = {
    "servemux": build_servemux_app,
    "response": build_response_app,
    "handler": build_handler_app,
    "router": build_router_app,
}


def build_stage(name: str) -> Handler:
    """
    Build the application for a stage.

    Raises:
        KeyError: Unknown stage name.
    """
    try:
        factory = STAGES[name]
    except KeyError:
        raise KeyError(f"Unknown stage {name!r}; choose from {', '.join(STAGES)}") from None
    return factory()
