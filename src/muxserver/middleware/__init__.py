"""
Handler wrappers that run around the application handler.

Only access logging lives here; it is applied by HTTPServer when
``ServerConfig.access_log`` is on.
"""

from .logging import AccessLogHandler, RequestLog

__all__ = ["AccessLogHandler", "RequestLog"]
