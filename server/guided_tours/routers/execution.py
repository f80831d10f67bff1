"""Execution router for the tour execution lifecycle."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import ExecutionServiceDependency
from ..schemas.execution import (
    AbandonExecutionRequest,
    CheckProximityRequest,
    CompleteExecutionRequest,
    ExecutionResponse,
    ExecutionsResponse,
    GetActiveExecutionsRequest,
    GetExecutionRequest,
    ProximityResponse,
    StartExecutionRequest,
)
from ..services.execution_service import ExecutionService
from .common import respond, run_operation
from .converters import convert_execution, convert_keypoint

router = APIRouter(prefix="/v1/execution", tags=["execution"])


@router.post("/start", response_model=ExecutionResponse)
async def start_execution(
    request: StartExecutionRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    """
    Start a purchased tour.

    Starting a tour that already has an active execution returns that
    execution instead of creating a second one.
    """
    execution, created = await run_operation(
        "start_execution",
        lambda: execution_service.start_execution(request),
        tourist_id=request.tourist_id,
        tour_id=request.tour_id,
    )
    message = "Tour started successfully" if created else "Resumed active tour execution"
    return respond(ExecutionResponse(message=message, execution=convert_execution(execution)))


@router.post("/proximity", response_model=ProximityResponse)
async def check_proximity(
    request: CheckProximityRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    """Report the tourist's position; completes at most one keypoint."""
    result = await run_operation(
        "check_proximity",
        lambda: execution_service.check_proximity(request),
        execution_id=request.execution_id,
        tourist_id=request.tourist_id,
    )

    if result.advanced:
        message = f"Key point reached: {result.keypoint.name}"
    else:
        message = "No key point nearby"

    return respond(
        ProximityResponse(
            message=message,
            near_key_point=result.advanced,
            nearby_key_point=convert_keypoint(result.keypoint) if result.keypoint is not None else None,
            distance=result.distance,
            execution=convert_execution(result.execution),
        )
    )


@router.post("/complete", response_model=ExecutionResponse)
async def complete_execution(
    request: CompleteExecutionRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    execution = await run_operation(
        "complete_execution",
        lambda: execution_service.complete_execution(request.execution_id, request.tourist_id),
        execution_id=request.execution_id,
        tourist_id=request.tourist_id,
    )
    return respond(ExecutionResponse(message="Tour completed", execution=convert_execution(execution)))


@router.post("/abandon", response_model=ExecutionResponse)
async def abandon_execution(
    request: AbandonExecutionRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    execution = await run_operation(
        "abandon_execution",
        lambda: execution_service.abandon_execution(request.execution_id, request.tourist_id),
        execution_id=request.execution_id,
        tourist_id=request.tourist_id,
    )
    return respond(ExecutionResponse(message="Tour abandoned", execution=convert_execution(execution)))


@router.post("/get", response_model=ExecutionResponse)
async def get_execution(
    request: GetExecutionRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    execution = await run_operation(
        "get_execution",
        lambda: execution_service.get_execution(request.execution_id, request.tourist_id),
        execution_id=request.execution_id,
        tourist_id=request.tourist_id,
    )
    return respond(ExecutionResponse(message="Execution retrieved successfully", execution=convert_execution(execution)))


@router.post("/active", response_model=ExecutionsResponse)
async def list_active_executions(
    request: GetActiveExecutionsRequest,
    execution_service: ExecutionService = ExecutionServiceDependency,
) -> JSONResponse:
    executions = await run_operation(
        "list_active_executions",
        lambda: execution_service.list_active_executions(request.tourist_id),
        tourist_id=request.tourist_id,
    )
    return respond(
        ExecutionsResponse(
            message="Active executions retrieved successfully",
            executions=[convert_execution(e) for e in executions],
        )
    )
