"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport to a handler. The handler can be anything from
muxserver.http: a ServeMux, a Router, a Handler subclass or a plain
function taking (writer, request).

    HTTPServer(handler, config).run()

binds the address and serves until interrupted.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    SocketServer (main thread)                                        │
    │        │ accept()                                                    │
    │        ▼                                                             │
    │    one worker thread per Connection                                  │
    │        │                                                             │
    │        ├── Connection.read_request()     bytes                       │
    │        ├── RequestParser.parse()         HTTPRequest                 │
    │        ├── ResponseWriter()              fresh per request           │
    │        ├── handler(writer, request)      AccessLog → Router → ...   │
    │        ├── writer.to_response()          HTTPResponse                │
    │        └── Connection.send_response()    bytes                       │
    │                                                                      │
    │        keep-alive? loop : close                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers run concurrently on the worker threads. Nothing is shared between
requests except the handler itself, which is why routers must be fully set
up before run() is called.

=============================================================================
ERRORS
=============================================================================

    Where                    What happens
    ─────────────────────    ───────────────────────────────────────────
    bind() fails             run() raises OSError; listen_and_serve()
                             logs "Could not start server" and exits 1
    request unparseable      400/405/413/505 text reply, connection closed
    first request too slow   408 text reply, connection closed
    handler raises           logged with traceback; 500 text reply if no
                             status was written yet; connection closed

=============================================================================
"""

import logging
import sys
import threading
import time
from typing import Any, Optional, Set, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLarge
from .http import (
    HTTPParseError,
    RequestParser,
    ResponseWriter,
    resolve_handler,
    write_text,
)
from .middleware import AccessLogHandler


logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    """
    Configure the root logger.

    basicConfig() does nothing if the root logger already has handlers, so
    an embedding application (or pytest) keeps its own setup. The package
    logger's level is always applied.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("muxserver").setLevel(level)


class HTTPServer:
    """
    Threaded HTTP/1.1 server for a single handler.

    =========================================================================
    USAGE
    =========================================================================

        router = Router()

        @router.route(r"^/hello$")
        def hello(ctx):
            ctx.text(200, "Hello world")

        server = HTTPServer(router, ServerConfig(port=9000))
        server.run()   # Blocks until Ctrl+C / SIGTERM / shutdown()

    =========================================================================
    """

    def __init__(self, handler: Any, config: Optional[ServerConfig] = None):
        """
        Args:
            handler: Object with serve_http(writer, request), or a function
                     taking (writer, request).
            config: Server configuration. Defaults to ServerConfig().

        Raises:
            ValueError: Invalid configuration.
            TypeError: ``handler`` is not a handler.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.handler = handler
        self._handler = resolve_handler(handler)
        if self.config.access_log:
            self._handler = AccessLogHandler(
                self._handler, log_format=self.config.log_format
            )

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()
        self._running = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The (host, port) actually bound, once the server is listening."""
        return self._socket_server.bound_address

    @property
    def is_running(self) -> bool:
        return self._running

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Start serving (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: The listening socket could not be bound.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._running = True

        logger.info(
            f"Starting HTTP server on {self.config.host}:{self.config.port} "
            f"({type(self.handler).__name__})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            if self._socket_server.bound_address is None:
                # Never listened: no workers, nothing to report
                self._running = False
            else:
                self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_bound(timeout)

    def shutdown(self) -> None:
        """Stop accepting connections. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self) -> None:
        configure_logging(self.config.log_level)

    def _shutdown(self, timeout: float = 5.0) -> None:
        """Wait (bounded) for in-flight connections, then report."""
        logger.info("Shutting down server...")
        self._running = False

        deadline = time.monotonic() + timeout
        with self._workers_lock:
            workers = list(self._workers)
        for worker in workers:
            worker.join(max(deadline - time.monotonic(), 0))

        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection) -> None:
        """Hand a new connection to its own worker thread."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers.add(worker)
        worker.start()

    def _process_connection(self, conn: Connection) -> None:
        """Keep-alive loop for one connection (runs in a worker thread)."""
        try:
            with conn:
                while self._running:
                    if not self._serve_one(conn):
                        break
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def _serve_one(self, conn: Connection) -> bool:
        """
        Read, dispatch and answer one request.

        Returns:
            True if the connection should stay open for another request.
        """
        try:
            raw_request = conn.read_request()
        except TimeoutError:
            self._send_error(conn, 408, "Request timeout")
            return False
        except RequestTooLarge as e:
            self._send_error(conn, 413, str(e))
            return False

        if raw_request is None:
            return False

        try:
            request = self._parser.parse(raw_request, conn.address)
        except HTTPParseError as e:
            logger.debug(f"[{conn.id}] Bad request: {e}")
            self._send_error(conn, e.status_code, str(e))
            return False

        conn.state = ConnectionState.PROCESSING
        writer = ResponseWriter()
        failed = False

        try:
            self._handler(writer, request)
        except Exception as e:
            failed = True
            logger.exception(f"[{conn.id}] Handler error on {request.method} {request.path}: {e}")
            if not writer.wrote_header:
                writer = ResponseWriter()
                write_text(writer, 500, "Internal Server Error")

        response = writer.to_response()

        keep_alive = request.is_keep_alive and self.config.keep_alive and not failed
        if keep_alive:
            response.headers.setdefault("Connection", "keep-alive")
            response.headers.setdefault(
                "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
            )
        else:
            response.headers["Connection"] = "close"

        data = response.to_bytes(
            self.config.server_name,
            include_body=request.method != "HEAD",
        )
        if not conn.send_response(data):
            return False

        if keep_alive:
            conn.set_keep_alive()
        return keep_alive

    def _send_error(self, conn: Connection, status: int, message: str) -> None:
        """Answer a request that never reached the handler, then close."""
        writer = ResponseWriter()
        writer.headers["Connection"] = "close"
        write_text(writer, status, message)
        conn.send_response(writer.to_response().to_bytes(self.config.server_name))


def listen_and_serve(handler: Any, config: Optional[ServerConfig] = None) -> None:
    """
    Serve ``handler`` until interrupted; exit the process if binding fails.

    This is the whole main() of every example server:

        listen_and_serve(router, ServerConfig(port=9000))

    A failure to bind is fatal: it is logged at CRITICAL as
    "Could not start server: <error>" and the process exits with status 1.
    There is no retry.
    """
    server = HTTPServer(handler, config)
    try:
        server.run()
    except OSError as e:
        logger.critical(f"Could not start server: {e}")
        sys.exit(1)
