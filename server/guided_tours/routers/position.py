"""Position router for the tourist position simulator."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import PositionServiceDependency
from ..schemas.execution import GetPositionRequest, PositionResponse, UpdatePositionRequest
from ..services.position_service import PositionService
from .common import respond, run_operation
from .converters import convert_position

router = APIRouter(prefix="/v1/position", tags=["position"])


@router.post("/update", response_model=PositionResponse)
async def update_position(
    request: UpdatePositionRequest,
    position_service: PositionService = PositionServiceDependency,
) -> JSONResponse:
    position = await run_operation(
        "update_position",
        lambda: position_service.update_position(request.tourist_id, request.latitude, request.longitude),
        tourist_id=request.tourist_id,
    )
    return respond(PositionResponse(message="Position updated", position=convert_position(position)))


@router.post("/get", response_model=PositionResponse)
async def get_position(
    request: GetPositionRequest,
    position_service: PositionService = PositionServiceDependency,
) -> JSONResponse:
    position = await run_operation(
        "get_position",
        lambda: position_service.get_current_position(request.tourist_id),
        tourist_id=request.tourist_id,
    )
    return respond(PositionResponse(message="Position retrieved successfully", position=convert_position(position)))
