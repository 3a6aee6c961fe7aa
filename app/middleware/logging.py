"""
Request Logging Middleware

Logs method, path, status and duration of every request, tagged with a
request id that is echoed back in the X-Request-ID header.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("app.requests")


class LoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                f"[{request_id}] {request.method} {request.url.path} failed after {elapsed_ms:.1f}ms"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        response.headers["X-Request-ID"] = request_id
        return response
