"""
=============================================================================
HANDLERS
=============================================================================

A handler is anything that answers a request by writing into a
ResponseWriter. Two shapes are accepted everywhere a handler is expected:

    1. A plain function:

        def hello(writer, request):
            writer.write("Hello world\\n")

    2. An object with a serve_http() method (subclass Handler):

        class App(Handler):
            def serve_http(self, writer, request):
                writer.write("Hello world\\n")

resolve_handler() turns either shape into the plain-function shape, so the
server and the multiplexer only ever call ``handler(writer, request)``.

=============================================================================
"""

from typing import Any, Callable

from .request import HTTPRequest
from .response import ResponseWriter


HandlerFunc = Callable[[ResponseWriter, HTTPRequest], None]


class Handler:
    """
    Base class for handler objects.

    Subclasses override serve_http(). Instances are callable, so a Handler
    can be passed anywhere a HandlerFunc is expected.
    """

    def serve_http(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        raise NotImplementedError

    def __call__(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        self.serve_http(writer, request)


def resolve_handler(handler: Any) -> HandlerFunc:
    """
    Normalize a handler object or function to a HandlerFunc.

    Raises:
        TypeError: If ``handler`` is neither callable nor has serve_http().
    """
    serve_http = getattr(handler, "serve_http", None)
    if callable(serve_http):
        return serve_http
    if callable(handler):
        return handler
    raise TypeError(f"{handler!r} is not a handler (expected serve_http() or a callable)")
