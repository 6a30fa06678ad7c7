"""
Request context middleware
Propagates correlation IDs and logs one line per request
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import config
from app.core.logger import logger
from app.core.telemetry import get_current_trace_id
from app.utils.correlation_id import new_correlation_id, set_correlation_id

QUIET_PATHS = ("/health", "/ready")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Takes the correlation ID from the request header or generates one
    - Stores it in context so every log line of the request carries it
    - Echoes it on the response and logs method, path, status and duration
    """

    def __init__(self, app, skip_paths=QUIET_PATHS):
        super().__init__(app)
        self.skip_paths = tuple(skip_paths)

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(config.correlation_id_header) or new_correlation_id()
        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[config.correlation_id_header] = correlation_id

        if request.url.path not in self.skip_paths:
            metadata = {
                "event": "http_request",
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
            trace_id = get_current_trace_id()
            if trace_id:
                metadata["trace_id"] = trace_id
            logger.info(f"{request.method} {request.url.path} {response.status_code}", metadata=metadata)

        return response
