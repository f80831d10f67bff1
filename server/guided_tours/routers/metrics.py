"""Prometheus scrape endpoint for tour execution and checkout metrics."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..core.dependencies import ExecutionServiceDependency
from ..core.observability import get_logger, get_prometheus_metrics, metrics_collector
from ..services.execution_service import ExecutionService
from .common import run_operation

logger = get_logger(__name__)

router = APIRouter(tags=["Observability"])


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Execution, checkout and request metrics; the active-execution gauge is sampled per scrape",
    response_class=Response,
)
async def metrics(execution_service: ExecutionService = ExecutionServiceDependency) -> Response:
    active = await run_operation("count_active_executions", execution_service.count_active_executions)
    metrics_collector.set_active_executions(active)
    logger.debug("metrics_scraped", active_executions=active)

    return Response(content=get_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)
