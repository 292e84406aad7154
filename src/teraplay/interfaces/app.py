"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from teraplay.infrastructure.config import AppConfig
from teraplay.interfaces.app_state import AppState
from teraplay.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, resolver) are created in lifespan().
    """
    app = FastAPI(
        title="TeraPlay",
        description="Resolves TeraBox share links to directly playable video URLs",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from teraplay.interfaces.api.resolve.router import router as resolve_router

    app.include_router(resolve_router, prefix="/api")

    @app.get("/api/healthz")
    async def healthz() -> dict[str, str]:
        """Liveness probe; returns 200 as long as the process is running."""
        resolver = getattr(app.state, "resolver", None)
        return {
            "status": "ok",
            "strategy": resolver.name if resolver else config.resolver_strategy,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
