"""
=============================================================================
HTTP RESPONSES AND THE RESPONSE WRITER
=============================================================================

Handlers never build response objects themselves. They get a ResponseWriter
and call three things on it, in this order:

    writer.headers["Content-Type"] = "text/plain"   1. set headers
    writer.write_header(200)                        2. commit the status
    writer.write("Hello world\\n")                  3. write the body

=============================================================================
WHY THE ORDER MATTERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     RESPONSE WRITER TIMELINE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   headers[...] = ...     ← still editable                           │
    │        │                                                             │
    │        ▼                                                             │
    │   write_header(code)     ← status + header SNAPSHOT taken here      │
    │        │                                                             │
    │        ▼                                                             │
    │   headers[...] = ...     ← too late: not part of the snapshot       │
    │   write_header(other)    ← ignored, logged as superfluous           │
    │        │                                                             │
    │        ▼                                                             │
    │   write(body)            ← appended to the body                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

On the wire the status line and headers go out before the body, so once the
status is written the headers are frozen. The writer enforces that even
though it buffers everything until the handler returns.

Calling write() first is allowed: it implies write_header(200).

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from http import HTTPStatus
from typing import Optional, Dict, Union
import logging


logger = logging.getLogger(__name__)


TEXT_PLAIN = "text/plain"


def reason_phrase(status: int) -> str:
    """Standard reason phrase for a status code ("" for unknown codes)."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Example: Wed, 01 Jan 2026 12:00:00 GMT
    """
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


@dataclass
class HTTPResponse:
    """
    A complete response, ready to serialize.

        HTTP/1.1 200 OK\\r\\n
        Content-Type: text/plain\\r\\n
        Content-Length: 12\\r\\n        ← added by to_bytes()
        Date: ...\\r\\n                 ← added by to_bytes()
        Server: muxserver/1.0\\r\\n     ← added by to_bytes()
        \\r\\n
        Hello world\\n
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 Not Found"."""
        phrase = reason_phrase(self.status)
        return f"{self.version} {int(self.status)} {phrase}".rstrip()

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def to_bytes(
        self,
        server_name: str = "muxserver/1.0",
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize the response for socket.sendall().

        Args:
            server_name: Value for the Server header if none is set.
            include_body: False for HEAD requests. Content-Length still
                          describes the body a GET would have received.

        Returns:
            Status line, headers, blank line and (optionally) the body.
        """
        response_headers = dict(self.headers)

        response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        head = "\r\n".join(lines).encode("iso-8859-1") + b"\r\n"
        return head + self.body if include_body else head


class ResponseWriter:
    """
    What a handler writes its response into.

    Attributes:
        headers: Mutable header dict. Changes after write_header() are not
                 sent.

    Example:
        def hello(writer, request):
            writer.headers["Content-Type"] = "text/plain"
            writer.write_header(200)
            writer.write("Hello world\\n")
    """

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self._status: Optional[int] = None
        self._sent_headers: Dict[str, str] = {}
        self._body = bytearray()

    @property
    def status(self) -> Optional[int]:
        """The committed status code, or None if nothing was written yet."""
        return self._status

    @property
    def wrote_header(self) -> bool:
        return self._status is not None

    @property
    def bytes_written(self) -> int:
        return len(self._body)

    def write_header(self, status: int) -> None:
        """
        Commit the status code and take the header snapshot.

        Only the first call counts. Later calls are logged and ignored, the
        way a real connection cannot take back a status line it already
        sent.

        Raises:
            ValueError: If status is not a three-digit code.
        """
        if self._status is not None:
            logger.warning(
                f"Superfluous write_header({int(status)}) call; "
                f"status {self._status} already written"
            )
            return

        if not 100 <= int(status) <= 999:
            raise ValueError(f"Invalid HTTP status code: {status}")

        self._status = int(status)
        self._sent_headers = dict(self.headers)

    def write(self, data: Union[str, bytes]) -> int:
        """
        Append data to the response body.

        Strings are UTF-8 encoded. Writes status 200 first if no status has
        been written.

        Returns:
            Number of bytes appended.
        """
        if self._status is None:
            self.write_header(HTTPStatus.OK)

        if isinstance(data, str):
            data = data.encode("utf-8")

        self._body += data
        return len(data)

    def to_response(self) -> HTTPResponse:
        """
        Freeze what the handler wrote into an HTTPResponse.

        A handler that wrote nothing produces an empty 200.
        """
        if self._status is None:
            return HTTPResponse(status=HTTPStatus.OK, headers=dict(self.headers))

        return HTTPResponse(
            status=self._status,
            headers=dict(self._sent_headers),
            body=bytes(self._body),
        )


def write_text(writer: ResponseWriter, status: int, body: str) -> None:
    """
    Write a plain-text response: header, then status, then body + "\\n".

    Shared by Response.text() and RequestContext.text().
    """
    writer.headers["Content-Type"] = TEXT_PLAIN
    writer.write_header(status)
    writer.write(f"{body}\n")


class Response:
    """
    A thin wrapper around a ResponseWriter that adds text().

    It holds the writer rather than replacing it, so the raw calls stay
    available next to the helper:

        resp = Response(writer)
        resp.text(200, "Hello world")      # same as the three raw calls
    """

    def __init__(self, writer: ResponseWriter):
        self.writer = writer

    @property
    def headers(self) -> Dict[str, str]:
        return self.writer.headers

    def write_header(self, status: int) -> None:
        self.writer.write_header(status)

    def write(self, data: Union[str, bytes]) -> int:
        return self.writer.write(data)

    def text(self, status: int, body: str) -> None:
        """Send ``body`` as text/plain with the given status."""
        write_text(self.writer, status, body)
