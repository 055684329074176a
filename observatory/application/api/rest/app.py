import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from observatory.application.api.v1.errors import map_observatory_error
from observatory.application.api.v1.routes import health, snapshot, sources
from observatory.application.di import create_container
from observatory.config import Config, configure_logging
from observatory.domain.aggregation.model.registry import AdapterRegistry
from observatory.domain.shared.error import ObservatoryError
from observatory.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container

    try:
        # Build the registry eagerly so bad source config fails at startup
        registry = await container.get(AdapterRegistry)
        logger.info("Serving %d sources", len(registry))
        yield
    finally:
        await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Trace inbound requests and every outbound provider call
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    container = create_container(config)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(sources.router, prefix="/api/v1")
    app_instance.include_router(snapshot.router, prefix="/api/v1")

    @app_instance.exception_handler(ObservatoryError)
    async def observatory_error_handler(request: Request, exc: ObservatoryError):
        http_exc = map_observatory_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
