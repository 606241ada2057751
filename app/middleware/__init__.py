"""
HTTP middleware for the reelstore API.

Provides:
- Request ID injection (header + logging context)
- Request/response logging
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
]
