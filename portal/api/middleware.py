"""
Request logging middleware.

Logs one line per request (method, path, status, latency, client IP) and
echoes or assigns an X-Request-ID header.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = ("/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = request.client.host if request.client else "unknown"
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.exception(
                f"{request.method} {request.url.path} failed after {latency_ms}ms "
                f"client={client_ip} request_id={request_id}"
            )
            raise

        latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        self._log_request(request.method, request.url.path, response.status_code, latency_ms, client_ip, request_id)
        return response

    def _log_request(
        self,
        method: str,
        path: str,
        status: int,
        latency_ms: float,
        client_ip: str,
        request_id: str,
    ) -> None:
        if path in EXCLUDED_PATHS and status < 400:
            return

        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            f"{method} {path} {status} {latency_ms}ms client={client_ip} request_id={request_id}",
        )
