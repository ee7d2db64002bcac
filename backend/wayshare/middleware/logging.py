"""
WayShare Backend - Request Logging Middleware
==============================================

What:  One structured access-log line per HTTP request.
How:   Measures duration around the downstream call, picks the log level
       from the status code, and attaches request metadata as `extra`.
When:  After RequestIDMiddleware (uses request ID for correlation).

Log line:
    PUT /api/rides/3 200 4.2ms [a1b2c3d4] from 10.0.0.7 alert=wayShareApp.ride.updated

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID, alert key
    ❌ Don't log: request bodies (password hashes, contact details)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from wayshare.middleware.request_id import request_id_var
from wayshare.routes.headers import alert_header_name, error_header_name

logger = logging.getLogger("wayshare.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration and correlation data.

    Level by status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    Health checks are not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Alert/error keys make mutations greppable: "alert=wayShareApp.ride.created"
        signal = response.headers.get(alert_header_name()) or response.headers.get(error_header_name())

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            f" alert={signal}" if signal else "",
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
