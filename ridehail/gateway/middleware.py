"""
RideHail - Security Middleware

Request/response middleware for:
- Request ID injection for tracing
- One access-log line per request
- Security headers

Cookies and tokens are never written to the log.
"""

import time
import uuid
from typing import Callable

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Cache-Control": "no-store",
}


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security-focused middleware for all incoming requests.

    Responsibilities:
    1. Inject X-Request-ID header for tracing (reuses the client's if sent)
    2. Add security headers to the response
    3. Log method, path, status and duration
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)

        logger.info(
            "{} {} -> {} in {:.1f} ms [{}]",
            request.method, request.url.path, response.status_code, duration_ms, request_id,
        )
        return response
