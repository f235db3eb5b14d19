"""
Security Header Middleware

Outermost application middleware. Every response leaving the application
carries the same header set, whatever happened further in: success,
validation failure, rate limit rejection or an unhandled exception. For the
latter the middleware logs the full exception and answers with the generic
500 body, so nothing internal reaches the client and the headers still apply.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from food_ordering.core.errors import ServerError

logger = logging.getLogger(__name__)


CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self'",
    "style-src 'self'",
    "img-src 'self' data:",
    "object-src 'none'",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

# Headers that disclose what is serving the request.
DISCLOSING_HEADERS = ("server", "x-powered-by")


def server_error_response() -> JSONResponse:
    """Generic 500 body; details stay in the server log."""
    error = ServerError()
    return JSONResponse(error.to_body(), status_code=error.status_code)


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    for name in DISCLOSING_HEADERS:
        if name in response.headers:
            del response.headers[name]
    return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the security header set to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
            response = server_error_response()
        return apply_security_headers(response)
