"""
DevCamper Backend — Request ID Middleware
===========================================

What:  Assigns an id to each request and echoes it in X-Request-ID.
How:   Uses the client's X-Request-ID when present, otherwise a short uuid4.
       The id lives in a ContextVar so loggers and error responses anywhere
       below this middleware can read it without passing it around.
Who:   The outermost middleware, so the access log, error envelopes and
       every log record of the request carry the same id.

Flow:
    1. Take X-Request-ID from the client, or the first 8 chars of a uuid4
    2. Store it in request_id_var and on request.state
    3. Run the rest of the stack, then reset the ContextVar
    4. Echo the id back in the X-Request-ID response header
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets and echoes the per-request correlation id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
