"""Keypoint router for guide-owned keypoint management."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import KeyPointServiceDependency
from ..schemas.tour import (
    AddKeyPointRequest,
    DeleteKeyPointRequest,
    DeleteKeyPointResponse,
    GetKeyPointsRequest,
    KeyPointResponse,
    KeyPointsResponse,
    UpdateKeyPointRequest,
)
from ..services.keypoint_service import KeyPointService
from .common import respond, run_operation
from .converters import convert_keypoint

router = APIRouter(prefix="/v1/keypoint", tags=["keypoint"])


@router.post("/add", response_model=KeyPointResponse)
async def add_keypoint(
    request: AddKeyPointRequest,
    keypoint_service: KeyPointService = KeyPointServiceDependency,
) -> JSONResponse:
    keypoint = await run_operation(
        "add_keypoint",
        lambda: keypoint_service.add_keypoint(request),
        tour_id=request.tour_id,
        guide_id=request.guide_id,
    )
    return respond(KeyPointResponse(message="Key point added successfully", key_point=convert_keypoint(keypoint)))


@router.post("/list", response_model=KeyPointsResponse)
async def list_keypoints(
    request: GetKeyPointsRequest,
    keypoint_service: KeyPointService = KeyPointServiceDependency,
) -> JSONResponse:
    """
    List a tour's keypoints.

    The owning guide and tourists who bought the tour see every keypoint;
    anyone else sees only the first one.
    """
    listing = await run_operation(
        "list_keypoints",
        lambda: keypoint_service.get_keypoints(request.tour_id, request.user_id),
        tour_id=request.tour_id,
    )
    return respond(
        KeyPointsResponse(
            message="Key points retrieved successfully",
            key_points=[convert_keypoint(kp) for kp in listing.keypoints],
            is_purchased=listing.is_purchased,
        )
    )


@router.post("/update", response_model=KeyPointResponse)
async def update_keypoint(
    request: UpdateKeyPointRequest,
    keypoint_service: KeyPointService = KeyPointServiceDependency,
) -> JSONResponse:
    keypoint = await run_operation(
        "update_keypoint",
        lambda: keypoint_service.update_keypoint(request),
        keypoint_id=request.keypoint_id,
        tour_id=request.tour_id,
    )
    return respond(KeyPointResponse(message="Key point updated successfully", key_point=convert_keypoint(keypoint)))


@router.post("/delete", response_model=DeleteKeyPointResponse)
async def delete_keypoint(
    request: DeleteKeyPointRequest,
    keypoint_service: KeyPointService = KeyPointServiceDependency,
) -> JSONResponse:
    await run_operation(
        "delete_keypoint",
        lambda: keypoint_service.delete_keypoint(request),
        keypoint_id=request.keypoint_id,
        tour_id=request.tour_id,
    )
    return respond(DeleteKeyPointResponse(message="Key point deleted successfully"))
