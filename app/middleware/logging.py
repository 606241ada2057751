"""
Request Logging Middleware

One line per request on the way in and one on the way out.
"""

import time
from typing import Callable, Optional, Set

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.config import logger


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, client, status code and duration.

    The request ID is attached by the logging filter, so it is not repeated
    in the message.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or {"/health", "/ready"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start = time.perf_counter()
        logger.info("Request: %s %s | client=%s", request.method, request.url.path, _client_ip(request))

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed: %s %s | error=%s | duration=%.2fms",
                request.method,
                request.url.path,
                exc,
                (time.perf_counter() - start) * 1000,
            )
            raise

        logger.info(
            "Response: %s %s | status=%d | duration=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response
