"""Security Headers Middleware

The checkout endpoints are called by the storefront in the browser and rely on
HTTP-only discount-code cookies, so the headers are on by default
(SECURITY_HEADERS_ENABLED). HSTS is opt-in because it only makes sense behind
HTTPS (HSTS_ENABLED).
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import config

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

HSTS_HEADER = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response and disables caching of API responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not config.SECURITY_HEADERS_ENABLED:
            return response

        for name, value in STATIC_HEADERS.items():
            response.headers[name] = value

        # Totals depend on the shopper's cookies
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"

        if config.HSTS_ENABLED:
            response.headers["Strict-Transport-Security"] = HSTS_HEADER

        return response
