"""
api-base: Request Logging Middleware
=====================================

What:  One access log line per request: method, path, status, duration, request ID.
How:   Level follows the status class so 4xx/5xx outcomes from the controller
       can be alerted on without parsing bodies:
           5xx → ERROR, 4xx → WARNING, everything else → INFO
       Paths listed in ``settings.log_request_skip_paths`` are not logged.

Request bodies are never logged; they may contain personal data.
"""

import logging
import time
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from api_base.config import settings
from api_base.middleware.request_id import request_id_var

logger = logging.getLogger("api_base.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with its response status and duration."""

    def __init__(self, app: ASGIApp, skip_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        if skip_paths is None:
            skip_paths = settings.log_request_skip_paths_list
        self.skip_paths = frozenset(skip_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
