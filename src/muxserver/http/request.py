"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes read from a connection into an HTTPRequest that handlers
and routers can inspect. Routers only ever look at ``request.path``; the rest
is here so handlers have something realistic to read.

=============================================================================
HTTP REQUEST FORMAT (RFC 7230)
=============================================================================

    GET /hello/Patrick?greeting=hi HTTP/1.1\r\n    ← Request line
    Host: localhost:9000\r\n                       ← Headers
    User-Agent: curl/8.0\r\n
    \r\n                                           ← Blank line
    (optional body)                                ← Body

    Request line:  METHOD SP REQUEST-URI SP HTTP-VERSION
    Path:          "/hello/Patrick"   (URL-decoded, no query string)
    Query:         {"greeting": ["hi"]}

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from urllib.parse import parse_qs, urlsplit, unquote
import re


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code the server should answer with:

        400 Bad Request                - Malformed request syntax
        405 Method Not Allowed         - Unknown method
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Attributes:
        method:         HTTP method (GET, POST, ...)
        path:           URL-decoded path without the query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header dictionary with LOWERCASE keys
        query_params:   "?a=1&a=2" → {"a": ["1", "2"]}
        raw_query:      The query string exactly as received ("a=1&a=2")
        body:           Raw body bytes (Content-Length bytes)
        client_address: (ip, port) of the peer
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    raw_query: str = ""
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    @property
    def host(self) -> str:
        """The Host header (required by HTTP/1.1)."""
        return self.headers.get("host", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def is_keep_alive(self) -> bool:
        """
        Check if the client wants the connection kept open.

            HTTP/1.1: keep-alive unless "Connection: close"
            HTTP/1.0: close unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    def get_header(self, name: str, default: str = "") -> str:
        """Get a header value (case-insensitive lookup)."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get the first value of a query parameter.

        Example:
            # URL: /hello?name=a&name=b
            request.get_query("name")  # Returns "a"
        """
        values = self.query_params.get(name, [])
        return values[0] if values else default


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    =========================================================================
    PARSING ALGORITHM
    =========================================================================

    1. Check size limit
    2. Split header section from body at \\r\\n\\r\\n
    3. Parse request line (method, target, version)
    4. Parse header lines into a lowercase dict
    5. Cut the body to Content-Length

    =========================================================================

    The parser keeps no per-request state, so one instance is shared by
    every worker thread.
    """

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH",
        "HEAD", "OPTIONS", "TRACE", "CONNECT",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes from the connection.
            client_address: Client's (ip, port) tuple.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        try:
            header_section = data[:header_end].decode("iso-8859-1")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Failed to decode request: {e}") from e
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        if not lines[0]:
            raise HTTPParseError("Empty request")

        method, path, raw_query, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", "0"))
        except ValueError as e:
            raise HTTPParseError("Invalid Content-Length header") from e
        if content_length < 0:
            raise HTTPParseError("Invalid Content-Length header")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=parse_qs(raw_query, keep_blank_values=True),
            raw_query=raw_query,
            body=body[:content_length],
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str, str]:
        """
        Parse the request line.

            "GET /hello/Patrick?x=1 HTTP/1.1"
             ─┬─ ─────────┬──────── ────┬───
              │           │             │
            Method       URI         Version

        Returns:
            Tuple of (method, decoded path, raw query string, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        if uri.startswith("/"):
            # Origin form. "//hello" is a path here, not a host.
            raw_path, _, raw_query = uri.partition("?")
        else:
            # Absolute form: "http://host/path?query"
            parsed = urlsplit(uri)
            if not parsed.scheme or not parsed.netloc:
                raise HTTPParseError(f"Invalid request target: {uri!r}")
            raw_path, raw_query = parsed.path, parsed.query

        path = unquote(raw_path) or "/"
        if not path.startswith("/"):
            raise HTTPParseError(f"Invalid request target: {uri!r}")

        return method, path, raw_query, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Repeated headers are joined with ", " (RFC 7230 section 3.2.2).
        Lines starting with whitespace continue the previous header.
        Lines without a colon are skipped.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name = match.group(1).strip().lower()
            value = match.group(2).strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024
) -> HTTPRequest:
    """Parse one request with a throwaway RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
