"""
DevConnector Backend - Middleware Package
==========================================

Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

The request id is assigned first so the access log line and every error
body carry it.
"""

from devconnector.middleware.logging import RequestLoggingMiddleware
from devconnector.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)

__all__ = [
    "RequestIDLogFilter",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "request_id_var",
]
