"""
=============================================================================
REQUEST CONTEXT
=============================================================================

Regex route handlers take one argument instead of (writer, request):

    def hello_name(ctx):
        ctx.text(200, f"Hello {ctx.captures[0]}")

The context bundles what a handler needs for one request:

    ┌──────────────────────────────────────────────────────────────────┐
    │  RequestContext                                                   │
    │                                                                   │
    │    request    ──► method, path, headers, query       (read)       │
    │    writer     ──► headers, write_header(), write()   (write)      │
    │    captures   ──► ("Patrick",)  from the matched pattern          │
    │                                                                   │
    │    text(code, body)  ──► the usual plain-text reply               │
    └──────────────────────────────────────────────────────────────────┘

It holds the request and the writer and forwards to them. It is not a
subclass of either, so it can't be mistaken for one.

A fresh context is built for every request and thrown away when the
handler returns.

=============================================================================
"""

from typing import Dict, Optional, Tuple, Union

from .request import HTTPRequest
from .response import ResponseWriter, write_text


class RequestContext:
    """
    Per-request handle given to Router handlers.

    Attributes:
        request:  The parsed HTTPRequest.
        writer:   The ResponseWriter for this request.
        captures: Substrings captured by the route pattern's groups, left
                  to right. Empty when the pattern has no groups or when
                  the default handler runs.
    """

    __slots__ = ("request", "writer", "captures")

    def __init__(
        self,
        request: HTTPRequest,
        writer: ResponseWriter,
        captures: Tuple[str, ...] = (),
    ):
        self.request = request
        self.writer = writer
        self.captures = tuple(captures)

    def __repr__(self) -> str:
        return (
            f"RequestContext(method={self.request.method!r}, "
            f"path={self.request.path!r}, captures={self.captures!r})"
        )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SIDE
    # ─────────────────────────────────────────────────────────────────────

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    def get_header(self, name: str, default: str = "") -> str:
        """Read a request header (case-insensitive)."""
        return self.request.get_header(name, default)

    def query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter."""
        return self.request.get_query(name, default)

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE SIDE
    # ─────────────────────────────────────────────────────────────────────

    @property
    def headers(self) -> Dict[str, str]:
        """Response headers. Edit before write_header()."""
        return self.writer.headers

    def write_header(self, status: int) -> None:
        self.writer.write_header(status)

    def write(self, data: Union[str, bytes]) -> int:
        return self.writer.write(data)

    def text(self, status: int, body: str) -> None:
        """
        Reply with a plain-text body.

        Sets Content-Type: text/plain, writes the status, then writes
        ``body`` followed by a single newline.
        """
        write_text(self.writer, status, body)
