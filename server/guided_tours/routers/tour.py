"""Tour router for authoring and publication."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import TourServiceDependency
from ..schemas.tour import (
    CreateTourRequest,
    GetMyToursRequest,
    GetTourRequest,
    GetToursRequest,
    PublishTourRequest,
    TourResponse,
    ToursResponse,
)
from ..services.tour_service import TourService
from .common import respond, run_operation
from .converters import convert_tour

router = APIRouter(prefix="/v1/tour", tags=["tour"])


@router.post("/create", response_model=TourResponse)
async def create_tour(
    request: CreateTourRequest,
    tour_service: TourService = TourServiceDependency,
) -> JSONResponse:
    """Create a draft tour owned by the requesting guide."""
    tour = await run_operation(
        "create_tour",
        lambda: tour_service.create_tour(request),
        guide_id=request.guide_id,
    )
    return respond(TourResponse(message="Tour created successfully", tour=convert_tour(tour)))


@router.post("/list", response_model=ToursResponse)
async def list_tours(
    request: GetToursRequest,
    tour_service: TourService = TourServiceDependency,
) -> JSONResponse:
    """List published tours, or a guide's own tours when published_only is false."""
    tours = await run_operation(
        "list_tours",
        lambda: tour_service.list_tours(request.published_only, request.user_id),
    )
    return respond(ToursResponse(message="Tours retrieved successfully", tours=[convert_tour(t) for t in tours]))


@router.post("/mine", response_model=ToursResponse)
async def list_my_tours(
    request: GetMyToursRequest,
    tour_service: TourService = TourServiceDependency,
) -> JSONResponse:
    """List every tour the guide authored, drafts included."""
    tours = await run_operation(
        "list_my_tours",
        lambda: tour_service.list_tours_by_guide(request.guide_id),
        guide_id=request.guide_id,
    )
    return respond(ToursResponse(message="Tours retrieved successfully", tours=[convert_tour(t) for t in tours]))


@router.post("/get", response_model=TourResponse)
async def get_tour(
    request: GetTourRequest,
    tour_service: TourService = TourServiceDependency,
) -> JSONResponse:
    tour = await run_operation(
        "get_tour",
        lambda: tour_service.get_tour(request.tour_id, request.user_id),
        tour_id=request.tour_id,
    )
    return respond(TourResponse(message="Tour retrieved successfully", tour=convert_tour(tour)))


@router.post("/publish", response_model=TourResponse)
async def publish_tour(
    request: PublishTourRequest,
    tour_service: TourService = TourServiceDependency,
) -> JSONResponse:
    """
    Publish a tour at a price.

    Only the owning guide may publish. Publishing again changes the price.
    """
    tour = await run_operation(
        "publish_tour",
        lambda: tour_service.publish_tour(request),
        tour_id=request.tour_id,
        guide_id=request.guide_id,
    )
    return respond(TourResponse(message="Tour published successfully", tour=convert_tour(tour)))
