"""
Request logging middleware.
"""
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Stamps every response with an ``X-Request-ID`` (reusing the caller's when
    sent) and logs method, path, status and duration.
    """

    def __init__(self, app, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id

        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration * 1000:.1f}ms [{request_id}]"
        )
        if duration > self.slow_request_threshold:
            logger.warning(f"Slow request: {message}")
        else:
            logger.info(message)

        return response
