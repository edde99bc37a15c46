"""
Logging middleware for request/response logging.
"""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .request_id import get_request_id

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per handled request; client errors log at WARNING."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        details = {
            "request_id": get_request_id(),
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception:
            details["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            logger.exception("Request crashed", extra=details)
            raise

        details["status_code"] = response.status_code
        details["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, "Request completed", extra=details)

        return response
