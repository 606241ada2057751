"""
Request ID Middleware

Tags each request with an ID for tracing across log lines.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import request_id_var
from app.core.security.constants import REQUEST_ID_HEADER
from app.core.security.utils import get_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Injects a request ID into request state, the logging context and the
    response headers.

    A well-formed client ``X-Request-ID`` is reused; otherwise one is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
