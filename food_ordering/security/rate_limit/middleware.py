"""
Rate Limit Middleware

Applies a RateLimiter to every request before routing, keyed by client
address. Rejections are returned directly as 429 responses; the security
header middleware wraps this one, so they still carry the security headers.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from food_ordering.core.errors import RateLimitError
from food_ordering.security.rate_limit.limiter import RateLimiter


def client_address(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Identify the client for rate limiting.

    X-Forwarded-For is only honoured when the deployment sits behind a proxy
    that sets it; otherwise any client could pick its own key.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global limiter applied to all routes."""

    def __init__(self, app, limiter: RateLimiter, trust_proxy_headers: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            await self.limiter.check(client_address(request, self.trust_proxy_headers))
        except RateLimitError as e:
            return JSONResponse(e.to_body(), status_code=e.status_code, headers=e.headers)
        return await call_next(request)
