"""
api-base: Middleware Package
=============================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → Route Handler / ApiController

    Request ID runs first so the logging middleware and the controller's own
    log lines can read the ID from the ContextVar.
"""

from api_base.middleware.logging import RequestLoggingMiddleware
from api_base.middleware.request_id import RequestIDMiddleware, request_id_var

__all__ = ["RequestIDMiddleware", "RequestLoggingMiddleware", "request_id_var"]
