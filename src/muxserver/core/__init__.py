"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport under the handlers:

    SocketServer   listening socket, accept loop, signals
    Connection     one client socket, buffered request reads

The HTTP server runs each Connection on its own worker thread. Handlers
and routers never see these classes.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
]
