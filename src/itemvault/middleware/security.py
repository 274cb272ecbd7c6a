"""Security headers middleware.

Learn: Adds standard hardening headers to every response:
- X-Content-Type-Options: prevents MIME-type sniffing (matters for
  served attachments, which are user-supplied files)
- X-Frame-Options: prevents clickjacking
- Referrer-Policy: limits referrer info leakage
- Cache-Control: no-store on JSON API responses, which carry tokens
  and personal records
- Strict-Transport-Security: forces HTTPS (only on HTTPS connections)
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_STATIC_PREFIX = "/uploads/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not request.url.path.startswith(_STATIC_PREFIX):
            response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
