"""
HTTP middleware for the tracker API.
"""

import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import log_request, log_response, set_correlation_id

CORRELATION_HEADER = "X-Correlation-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and its response time.

    A correlation ID sent by the caller (the CLI or the MCP client) is reused,
    otherwise a new one is generated. It is echoed back in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        log_request(request, request.method, request.url.path, correlation_id=correlation_id)

        started = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            log_response(response.status_code if response is not None else 500, elapsed_ms, correlation_id)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
