import asyncio
import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.errors import UpstreamUnavailable

logger = logging.getLogger("app.access")


class LogMiddleware(BaseHTTPMiddleware):
    """Logs every /api request and bounds its latency.

    A request that exceeds ``timeout_seconds`` (typically a slow data store)
    is answered with a 504 ``upstream_unavailable`` payload.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float = 10.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        try:
            response = await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            err = UpstreamUnavailable.timed_out()
            logger.error("%s %s timed out after %.1fs", request.method, request.url.path, self.timeout_seconds)
            response = JSONResponse(status_code=err.status_code, content=err.to_dict())

        process_time = int((time.perf_counter() - start_time) * 1000)
        if request.url.path.startswith("/api"):
            logger.info("%s %s -> %s (%d ms)", request.method, request.url.path, response.status_code, process_time)
        return response
