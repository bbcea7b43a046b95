"""
=============================================================================
EXAMPLE: A ROUTER WITH MORE THAN HELLO
=============================================================================

The router stage with a few extra routes, to show what captures and the
default handler are good for:

    curl localhost:9000/hello/Patrick          → Hello Patrick
    curl localhost:9000/add/2/40               → 42
    curl localhost:9000/files/docs/readme.md   → docs/readme.md
    curl localhost:9000/teapot                 → 418 I'm a teapot, try /hello

Run it:

    python examples/hello_router.py [port]

=============================================================================
"""

import sys

from muxserver import Router, ServerConfig, listen_and_serve


def build_app() -> Router:
    def fallback(ctx):
        ctx.text(418, f"I'm a teapot, try /hello (you asked for {ctx.path})")

    router = Router(default_handler=fallback)

    @router.route(r"^/hello$")
    def hello(ctx):
        ctx.text(200, "Hello world")

    @router.route(r"^/hello/([\w._-]+)$")
    def hello_name(ctx):
        greeting = ctx.query("greeting", "Hello")
        ctx.text(200, f"{greeting} {ctx.captures[0]}")

    @router.route(r"^/add/(\d+)/(\d+)$")
    def add(ctx):
        a, b = ctx.captures
        ctx.text(200, str(int(a) + int(b)))

    # Everything after /files/ in one capture, slashes included
    @router.route(r"^/files/(.+)$")
    def files(ctx):
        ctx.headers["Cache-Control"] = "no-store"
        ctx.text(200, ctx.captures[0])

    return router


if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 9000

    app = build_app()
    app.print_routes()
    listen_and_serve(app, ServerConfig(port=port))
