import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .api.v1.endpoints import router as basin_router, limiter, validation_error_handler
from .api_models import HealthResponse
from .config import Settings, get_settings, runtime_config_summary
from .dependencies import (
    ServiceContainer, close_service_container, get_service_container, init_service_container
)
from .logging_config import SERVICE_NAME, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Load the basin region and grid datasets before serving traffic.

    Bad configuration or unreadable datasets abort startup; there is no
    degraded mode since every route depends on the region set.
    """
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL, use_json=settings.use_json_logs, service_name=SERVICE_NAME)
    logger.info("Starting Basin Term Service...", extra={"event": "startup_begin"})

    try:
        init_service_container(settings)
    except Exception:
        logger.error("Failed to start Basin Term Service", extra={"event": "startup_failed"}, exc_info=True)
        raise

    logger.info(
        "Basin Term Service started",
        extra={"event": "startup_complete", **runtime_config_summary(settings)}
    )

    yield

    logger.info("Shutting down Basin Term Service...", extra={"event": "shutdown_begin"})
    await close_service_container()
    logger.info("Basin Term Service shut down", extra={"event": "shutdown_complete"})


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="Basin Term Service",
        description="Resolves z1p0 and z2p5 basin depth terms for seismic site amplification",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS", "HEAD"],
        allow_headers=["Accept", "Content-Type", "Origin"],
    )

    app.include_router(basin_router)

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check(container: ServiceContainer = Depends(get_service_container)):
        local_stats = container.local_source.get_statistics()
        remote_stats = container.remote_source.get_statistics()
        return HealthResponse(
            status="healthy",
            service=SERVICE_NAME,
            basin_regions_configured=len(container.region_dataset),
            local_grids_loaded=len(local_stats["grids"]),
            arcgis_configured=remote_stats["configured"],
            details={"sources": {local_stats["source"]: local_stats, remote_stats["source"]: remote_stats}}
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server_settings = Settings()
    uvicorn.run("basin_service.main:app", host=server_settings.HOST, port=server_settings.PORT)
