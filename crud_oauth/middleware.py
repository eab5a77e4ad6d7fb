"""Request logging middleware."""

import logging
import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log a one-line summary of every request."""

    def __init__(self, app: Callable) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("crud_oauth.request")

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        method = request.method
        path = request.url.path
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception("HTTP %s %s raised an unhandled exception", method, path)
            raise
        duration = time.perf_counter() - start
        self.logger.info("HTTP %s %s status=%s duration=%.3f", method, path, response.status_code, duration)
        response.headers.setdefault("X-Process-Time", f"{duration:.6f}")
        return response
