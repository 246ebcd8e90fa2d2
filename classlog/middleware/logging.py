# ABOUTME: Logging middleware for request/response tracking
# ABOUTME: Logs method, path, status code and response time for every request

import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("classlog.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log request/response metrics.

    This middleware captures:
    - Response time in milliseconds
    - Actual response status code
    """

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, request.url.path)
            raise

        response_time_ms = int((time.time() - start) * 1000)
        logger.info(
            "%s %s -> %d (%d ms)",
            request.method,
            request.url.path,
            response.status_code,
            response_time_ms,
        )
        return response
