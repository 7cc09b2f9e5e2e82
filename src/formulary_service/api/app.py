"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from formulary_service import __version__
from formulary_service.config import settings
from formulary_service.api.routes import formulary, health, workflows
from formulary_service.api.middleware import RequestLoggingMiddleware, MetricsMiddleware
from formulary_service.services.formulary import FormularyService, create_formulary_service
from formulary_service.services.kv_store import KeyValueStoreError
from formulary_service.utils.error_codes import ErrorCode
from formulary_service.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(service: Optional[FormularyService] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: FormularyService to serve; built from settings when omitted

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        close = getattr(app.state.formulary.store, "close", None)
        if callable(close):
            close()

    app = FastAPI(
        title=settings.app_name,
        description="Formulary index and clinical workflow service",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.formulary = service or create_formulary_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    if settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    @app.exception_handler(KeyValueStoreError)
    async def store_unavailable_handler(request: Request, exc: KeyValueStoreError) -> JSONResponse:
        logger.error(
            f"Key-value store unavailable: {exc}",
            extra={
                "code": ErrorCode.STORE_UNAVAILABLE,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        return JSONResponse(
            status_code=503,
            content={"detail": str(exc), "code": ErrorCode.STORE_UNAVAILABLE},
        )

    # Routes
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(formulary.router, prefix="/formulary", tags=["formulary"])
    app.include_router(workflows.step_therapy_router, prefix="/step-therapy", tags=["step-therapy"])
    app.include_router(workflows.prior_auth_router, prefix="/prior-auth", tags=["prior-auth"])

    # Prometheus metrics endpoint
    if settings.metrics_enabled:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    return app
