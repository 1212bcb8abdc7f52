"""
DevCamper Backend — Security Headers Middleware
=================================================

What:  Adds browser-hardening headers to every response.
How:   After the route runs, each header below is set with setdefault, so a
       handler that sets one itself keeps its own value.
When:  Strict-Transport-Security is only sent in production, where the API
       sits behind HTTPS; sending it over plain http in development would
       pin local browsers to https.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    # Browsers must trust Content-Type instead of sniffing (uploaded photos)
    "X-Content-Type-Options": "nosniff",
    # Only same-origin pages may frame responses
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    # Old IE: downloads are saved, never opened in the site's context
    "X-Download-Options": "noopen",
    # No Flash/PDF cross-domain policy files
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}

# 180 days
HSTS = "max-age=15552000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Applies SECURITY_HEADERS (plus HSTS when `hsts` is set) to every response.

    Configuration:
        hsts: create_app() passes settings.is_production
    """

    def __init__(self, app, hsts: bool = False, **kwargs):
        super().__init__(app, **kwargs)
        self.headers = dict(SECURITY_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = HSTS

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
