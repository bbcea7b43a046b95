"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and hands every accepted client to a callback.
Nothing here knows about HTTP.

    socket()  → bind(host, port) → listen(backlog) → accept() loop
                     │
                     └── fails? (port in use, no permission)
                         logged here, re-raised to the caller

=============================================================================
SHUTDOWN
=============================================================================

accept() would block forever, so the listening socket gets a 1 second
timeout. The loop wakes up once a second to check the running flag:

    while running:
        try:
            accept()          ← at most 1s
        except timeout:
            continue          ← re-check running

shutdown() just clears the flag, which makes it safe to call from a signal
handler or another thread.

SIGINT (Ctrl+C) and SIGTERM trigger shutdown() when the server runs on the
main thread. Python only lets the main thread install signal handlers, so a
server started from a worker thread (as the tests do) skips that step.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    ACCEPT_TIMEOUT = 1.0

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound = threading.Event()
        self._stopped = threading.Event()
        self._original_handlers: dict = {}
        self.bound_address: Optional[Tuple[str, int]] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def _create_socket(self) -> socket.socket:
        """Create the listening socket with SO_REUSEADDR and TCP_NODELAY."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting for TIME_WAIT to expire
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Small responses should leave immediately
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.ACCEPT_TIMEOUT)
        return sock

    def _setup_signals(self) -> None:
        """Install SIGINT/SIGTERM handlers (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

    def _restore_signals(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]) -> None:
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called with each new Connection. Must not
                                block for long; the HTTP server hands the
                                connection to a worker thread.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._stopped.clear()
        self.bound_address = None
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            self._stopped.set()
            raise

        self.bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._setup_signals()
        self._bound.set()

        logger.info(f"Server listening on {self.bound_address[0]}:{self.bound_address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]) -> None:
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Re-check self._running
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                keep_alive_timeout=self.config.keep_alive_timeout,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def wait_until_bound(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._bound.wait(timeout)

    def shutdown(self) -> None:
        """Ask the accept loop to stop. Idempotent."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is closed."""
        return self._stopped.wait(timeout)

    def _cleanup(self) -> None:
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._bound.clear()
        self._stopped.set()
        logger.info("Socket server stopped")
