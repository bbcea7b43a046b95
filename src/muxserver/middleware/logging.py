"""
=============================================================================
ACCESS LOGGING
=============================================================================

Wraps any handler and logs one line per request once it returns:

    127.0.0.1 - - [19/Oct/2026:15:42:07 +0000] "GET /hello/Patrick" 200 14 0.21ms

or, with log_format="json":

    {"request_id": "3f2a9c1e", "method": "GET", "path": "/hello/Patrick", ...}

The wrapper sits outside the router, so it sees every request, including
the ones answered by the default handler and the ones whose handler raised.

    HTTPServer ──► AccessLogHandler ──► Router / ServeMux / Handler
                        │
                        └── reads writer.status and writer.bytes_written
                            after the inner handler returns

=============================================================================
"""

from dataclasses import dataclass, asdict
from typing import Optional
import json
import logging
import time
import uuid

from ..http.handler import Handler, resolve_handler
from ..http.request import HTTPRequest
from ..http.response import ResponseWriter


logger = logging.getLogger(__name__)


@dataclass
class RequestLog:
    """
    One access-log record.

    status_code is 200 when the handler wrote nothing (an empty 200 is what
    the client receives in that case).
    """

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        record = asdict(self)
        record["duration_ms"] = round(self.duration_ms, 2)
        return record

    def to_text(self) -> str:
        """Apache-style line."""
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogHandler(Handler):
    """
    Handler wrapper that logs each request.

    Args:
        handler: The wrapped handler (object or function).
        log_format: "text" (Apache style) or "json".
        log_level: Level for the access lines.
        skip_paths: Paths that are served but not logged.
    """

    def __init__(
        self,
        handler,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        self.inner = handler
        self._serve = resolve_handler(handler)
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def serve_http(self, writer: ResponseWriter, request: HTTPRequest) -> None:
        request_id = uuid.uuid4().hex[:8]
        start = time.perf_counter()

        try:
            self._serve(writer, request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        if request.path in self.skip_paths:
            return

        entry = RequestLog(
            request_id=request_id,
            method=request.method,
            path=request.path,
            query=request.raw_query,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=writer.status or 200,
            content_length=writer.bytes_written,
            duration_ms=(time.perf_counter() - start) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
