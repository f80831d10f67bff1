"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    TourServiceError,
    generic_exception_handler,
    service_error_handler,
    validation_exception_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    get_logger,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_structured_logging,
    setup_tracing,
)
from .routers import (
    cart_router,
    execution_router,
    health_router,
    keypoint_router,
    metrics_router,
    position_router,
    tour_router,
)

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for library loggers (uvicorn, sqlalchemy)
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Sets up tracing and creates tables on startup; disposes the engine on
    shutdown.
    """
    logger.info("application_starting", environment=settings.environment, debug=settings.debug)

    try:
        setup_tracing(settings.service_name)
        instrument_sqlalchemy(engine)
        logger.info("observability_configured", otlp_endpoint=settings.otlp_endpoint)

        await init_db()
        logger.info("database_initialized")
    except Exception as e:
        logger.error("application_startup_failed", error=str(e))
        raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")
    try:
        await close_db()
        logger.info("database_connections_closed")
    except SQLAlchemyError as e:
        logger.error("application_cleanup_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Guided Tours API",
        description=(
            "RPC-over-HTTP API for authoring guided tours, buying them through a cart, "
            "and walking them with location-driven keypoint completion"
        ),
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )

    setup_middleware(app, enable_logging=True)

    # Instrument FastAPI with OpenTelemetry
    instrument_fastapi(app)

    # Every failure leaves as a failure envelope
    app.add_exception_handler(TourServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is healthy and responsive",
        response_model=dict,
    )
    async def health_check():
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": __version__,
            "environment": settings.environment,
            "debug": settings.debug,
        }

    @app.get(
        "/ready",
        tags=["Health"],
        summary="Readiness Check",
        description="Check that the database accepts connections",
        response_model=dict,
    )
    async def readiness_check():
        """
        Readiness check that round-trips a trivial query to the database.

        Returns:
            JSONResponse: 200 when ready, 503 when the database is unreachable
        """
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("readiness_check_failed", error=str(e))
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "not_ready",
                    "service": settings.service_name,
                    "checks": {"database": "unavailable"},
                },
            )

        return {
            "status": "ready",
            "service": settings.service_name,
            "checks": {"database": "ok"},
        }

    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        description="Get detailed information about the service",
        response_model=dict,
    )
    async def service_info():
        return {
            "service": settings.service_name,
            "version": __version__,
            "description": "Guided tours: authoring, purchases and tour execution",
            "environment": settings.environment,
            "debug": settings.debug,
            "features": {
                "proximity_detection": True,
                "optimistic_concurrency": True,
                "tracing": True,
                "problem_details": True,
            },
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
            },
        }

    # Register API routers
    app.include_router(health_router)
    app.include_router(tour_router)
    app.include_router(keypoint_router)
    app.include_router(cart_router)
    app.include_router(execution_router)
    app.include_router(position_router)
    app.include_router(metrics_router)

    logger.info("application_created")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "guided_tours.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
