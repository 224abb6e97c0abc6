"""
Correlation ID Middleware

Tags every request with a correlation ID that is bound into all log entries
written while the request is handled.
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging import set_correlation_id


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Reads X-Correlation-ID from the request (or generates one), makes it
    available to the logger, and echoes it on the response.
    """

    HEADER_NAME = "X-Correlation-ID"

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        response = await call_next(request)
        response.headers[self.HEADER_NAME] = correlation_id
        return response
