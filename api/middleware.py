"""
App-level middleware and the inbound auth boundary handler.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from utils.errors import AuthBoundaryError

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach request timing and the AuthBoundaryError → 401 mapping."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s → %d in %.3fs (session=%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            request.headers.get("Mcp-Session-Id", "-"),
        )
        return response

    @app.exception_handler(AuthBoundaryError)
    async def auth_boundary_error(request: Request, exc: AuthBoundaryError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=401,
            content={"error": "invalid_token", "error_description": exc.message},
            headers={"WWW-Authenticate": "Bearer"},
        )
