"""
DevCamper Backend — Rate Limiting Middleware
==============================================

What:  Per-IP sliding window limiter: RATE_LIMIT_REQUESTS requests per
       RATE_LIMIT_WINDOW seconds (default 100 per 10 minutes).
How:   Keeps a deque of request timestamps per client ip; drops the ones
       older than the window, rejects with 429 when the rest reach the
       limit. Retry-After tells the client when the oldest entry expires.
Who:   Every request except health checks and the API docs.

Algorithm: Sliding Window Log
    1. Pop timestamps older than now - window from the left of the ip's deque
    2. If the deque still holds `limit` entries, reject with 429
    3. Otherwise append now and pass the request on

    Popping from the left is O(1) per expired entry, so each request costs
    amortized O(1). Memory is O(ips x limit).

Housekeeping:
    Every 1000 admitted requests, ips whose newest timestamp has left the
    window are dropped from the table.

State is in process memory, so each worker process limits independently.
Multi-worker deployments that need one shared budget would move the
timestamps to Redis.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from devcamper.config import Settings
from devcamper.exceptions import RateLimitExceededError
from devcamper.middleware.logging import client_ip
from devcamper.responses import error_response

logger = logging.getLogger(__name__)

# Cleanup of idle ips runs every this many requests
_CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from Settings):
        rate_limit_requests: max requests per window (default 100)
        rate_limit_window:   window length in seconds (default 600)

    Response on rate limit:
        429 with the standard error envelope
        Retry-After: seconds until the oldest request leaves the window

    Safe for a single async process; the table is not shared across workers.
    """

    # Health checks and docs stay reachable under load
    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, settings: Settings, **kwargs):
        super().__init__(app, **kwargs)
        self.limit = settings.rate_limit_requests
        self.window = settings.rate_limit_window
        # ip → timestamps of admitted requests, oldest first
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        # admitted requests since startup; drives the periodic cleanup
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        ip = client_ip(request)
        now = time.time()
        window_start = now - self.window

        timestamps = self._requests[ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.limit:
            # +1 so the client does not retry a fraction of a second early
            retry_after = int(timestamps[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                ip,
                len(timestamps),
                self.window,
            )
            return error_response(RateLimitExceededError(retry_after=retry_after, context={"ip": ip}))

        timestamps.append(now)

        self._seen += 1
        if self._seen % _CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
