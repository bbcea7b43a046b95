"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket. TCP delivers a byte stream, not messages,
so the Connection buffers until it holds one whole HTTP request:

    recv() → b"GET /hello HT"          ← partial, keep reading
    recv() → b"TP/1.1\\r\\nHost: x\\r\\n\\r\\n"
                                       ← header terminator found
    Content-Length: 0                  ← nothing more to read
    return b"GET /hello HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n"

Bytes after the end of that request stay buffered for the next one
(pipelined keep-alive requests).

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its lifecycle (for logs and debugging)."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    KEEP_ALIVE = "keep_alive"
    CLOSED = "closed"


class RequestTooLarge(ValueError):
    """The client sent more bytes than max_request_size."""


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current ConnectionState.
        requests_handled: Requests read on this connection so far.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.monotonic)
    requests_handled: int = 0

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    keep_alive_timeout: float = 5.0
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.monotonic() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request.

        Uses the keep-alive timeout once a request has already been served
        on this connection.

        Returns:
            The request bytes, or None if the client closed the connection
            (or went idle between keep-alive requests).

        Raises:
            TimeoutError: The first request did not arrive in time.
            RequestTooLarge: The request exceeded max_request_size.
        """
        self.state = ConnectionState.READING

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                self._check_size()

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # The parser reports the short body
                self._buffer += chunk
                self._check_size()

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            return request_data

        except socket.timeout:
            if self.requests_handled > 0 and not self._buffer:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _check_size(self) -> None:
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLarge(f"Request too large: {len(self._buffer)} bytes")

    @staticmethod
    def _parse_content_length(headers: bytes) -> int:
        """
        Find Content-Length in the raw header block.

        Only used to know how many body bytes to wait for; the
        RequestParser validates the value properly.
        """
        for line in headers.split(b"\r\n"):
            name, _, value = line.partition(b":")
            if name.strip().lower() == b"content-length":
                try:
                    return max(int(value.strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes with sendall().

        Returns:
            True on success, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def set_keep_alive(self) -> None:
        self.state = ConnectionState.KEEP_ALIVE

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Close the connection: shutdown(SHUT_WR) to send FIN, drain what the
        client still sends, then close the descriptor. Safe to call twice.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
