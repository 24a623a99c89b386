"""
Correlation ID Middleware
Tags every request with a correlation id and logs it on completion
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings
from core.logging import get_structured_logger
from core.utils.correlation import new_correlation_id

logger = get_structured_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Reads the correlation header (or generates a UUIDv7), stores it on
    request.state.correlation_id and echoes it on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = settings.CORRELATION_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(self.header_name, "").strip() or new_correlation_id()
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        response.headers[self.header_name] = correlation_id
        logger.log_request(
            request.method,
            request.url.path,
            correlation_id=correlation_id,
            duration_ms=duration_ms,
            status_code=response.status_code,
        )
        return response
