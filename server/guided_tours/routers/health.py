"""Liveness ping in the RPC style of the other routers."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.config import settings
from ..core.observability import get_logger
from ..models.tour import utcnow
from ..schemas.common import isoformat_utc
from ..schemas.health import HealthResponse
from .common import respond

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.post("/ping", response_model=HealthResponse)
async def health_ping() -> JSONResponse:
    """Report that the service is up; touches no storage."""
    logger.debug("health_ping", environment=settings.environment)
    return respond(
        HealthResponse(
            message="Service is healthy",
            service=settings.service_name,
            environment=settings.environment,
            version=__version__,
            timestamp=isoformat_utc(utcnow()),
        )
    )
