"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One dataclass holds every knob the example servers expose. Every stage
listens on ":9000" unless told otherwise.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m muxserver router --port 3000                    │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MUX_PORT=3000 python -m muxserver                         │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the example servers.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - keep_alive, keep_alive_timeout, max_request_size

    LOGGING
    - log_level, log_format, access_log

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    "0.0.0.0" listens on every interface.
    Use "127.0.0.1" to keep the server private to this machine.
    """

    port: int = 9000
    """
    The port number to listen on.
    0 asks the OS for a free ephemeral port (handy in tests).
    """

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for the first request on a connection.
    None = block forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Serve several requests on one TCP connection when the client asks."""

    keep_alive_timeout: float = 5.0
    """Idle seconds to wait for the next request on a kept-alive connection."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """Requests larger than this are rejected with 413."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' for humans, 'json' for log aggregators."""

    access_log: bool = True
    """Log one line per request (method, path, status, duration)."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "muxserver/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MUX_HOST        Server host (default: 0.0.0.0)
        MUX_PORT        Server port (default: 9000)
        MUX_TIMEOUT     Request timeout in seconds (default: 30)
        MUX_LOG_LEVEL   Logging level (default: INFO)
        MUX_LOG_FORMAT  Access log format, text or json (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("MUX_HOST", "0.0.0.0"),
            port=int(os.getenv("MUX_PORT", "9000")),
            timeout=float(os.getenv("MUX_TIMEOUT", "30")),
            log_level=os.getenv("MUX_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("MUX_LOG_FORMAT", "text").lower(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer before anything touches the network, so a bad
        value stops the process at startup instead of on the first request.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
