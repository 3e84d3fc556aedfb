"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def _log_request(request: Request, status_code: int, elapsed: float) -> None:
    logger.info(
        "%s %s → %d — %.3fs (user=%s)",
        request.method,
        request.url.path,
        status_code,
        elapsed,
        getattr(request.state, "user_id", "-"),
    )


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The server-error handler answers 500 further out; log it here too.
            _log_request(request, 500, time.perf_counter() - start)
            raise
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        _log_request(request, response.status_code, elapsed)
        return response
