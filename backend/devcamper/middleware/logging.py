"""
DevCamper Backend — Access Logging Middleware
===============================================

What:  One access-log line per request on the `devcamper.access` logger.
How:   Times the downstream call and logs
           GET /api/v1/bootcamps?page=2 200 12.4ms [a1b2c3d4] from 10.0.0.7
       at a level picked from the status class. /health is skipped.

Request bodies and Authorization headers are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from devcamper.middleware.request_id import request_id_var

access_logger = logging.getLogger("devcamper.access")

QUIET_PATHS = {"/health"}


def client_ip(request: Request) -> str:
    """Peer address; also the rate limiter's bucket key."""
    if request.client is None:
        return "unknown"
    return request.client.host


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        target = f"{path}?{request.url.query}" if request.url.query else path
        access_logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            client_ip(request),
        )
        return response
