"""Keypoint service: guide-owned CRUD and purchase-gated listing."""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import commit_or_raise
from ..core.exceptions import NotFoundError
from ..core.observability import get_logger
from ..models import KeyPoint
from ..schemas.tour import AddKeyPointRequest, DeleteKeyPointRequest, UpdateKeyPointRequest
from .authorization import guide_owns_tour, parse_id, require_tour_owner
from .purchase_service import PurchaseService
from .tour_service import TourService

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyPointListing:
    """Keypoints visible to a caller, plus whether they bought the tour."""

    keypoints: List[KeyPoint]
    is_purchased: bool


class KeyPointService:
    """Service for keypoint-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.purchase_service = PurchaseService(db)

    async def add_keypoint(self, request: AddKeyPointRequest) -> KeyPoint:
        """
        Add a keypoint to a tour the guide owns, in any tour state.

        Raises:
            NotFoundError: If tour not found
            UnauthorizedError: If the guide does not own the tour
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(request.tour_id, "tour"))
        require_tour_owner(tour, request.guide_id)

        keypoint = KeyPoint(
            tour_id=tour.id,
            latitude=request.latitude,
            longitude=request.longitude,
            name=request.name,
            description=request.description,
            image=request.image,
            order=request.order,
            sequence=await self._next_sequence(tour.id),
        )

        self.db.add(keypoint)
        await commit_or_raise(self.db, "keypoint")

        logger.info(
            "keypoint_added",
            keypoint_id=str(keypoint.id),
            tour_id=str(tour.id),
            latitude=keypoint.latitude,
            longitude=keypoint.longitude,
        )
        return keypoint

    async def update_keypoint(self, request: UpdateKeyPointRequest) -> KeyPoint:
        """
        Update a keypoint's location and details.

        Raises:
            NotFoundError: If the tour or the keypoint (within that tour) is absent
            UnauthorizedError: If the guide does not own the tour
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(request.tour_id, "tour"))
        keypoint = await self._get_tour_keypoint_or_raise(tour.id, request.keypoint_id)
        require_tour_owner(tour, request.guide_id)

        keypoint.latitude = request.latitude
        keypoint.longitude = request.longitude
        keypoint.name = request.name
        keypoint.description = request.description
        keypoint.image = request.image
        if request.order is not None:
            keypoint.order = request.order

        await commit_or_raise(self.db, "keypoint")

        logger.info("keypoint_updated", keypoint_id=str(keypoint.id), tour_id=str(tour.id))
        return keypoint

    async def delete_keypoint(self, request: DeleteKeyPointRequest) -> None:
        """
        Delete a keypoint. Completions already recorded against it are kept.

        Raises:
            NotFoundError: If the tour or the keypoint (within that tour) is absent
            UnauthorizedError: If the guide does not own the tour
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(request.tour_id, "tour"))
        keypoint = await self._get_tour_keypoint_or_raise(tour.id, request.keypoint_id)
        require_tour_owner(tour, request.guide_id)

        await self.db.delete(keypoint)
        await commit_or_raise(self.db, "keypoint")

        logger.info("keypoint_deleted", keypoint_id=request.keypoint_id, tour_id=str(tour.id))

    async def get_keypoints(self, tour_id: str, user_id: Optional[str] = None) -> KeyPointListing:
        """
        List a tour's keypoints as visible to the caller.

        The guide and tourists holding a purchase token see every keypoint.
        Everyone else sees only the first keypoint of a published tour, and
        an unpublished tour is not visible to them at all.

        Raises:
            NotFoundError: If the tour is absent or not visible to the caller
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(tour_id, "tour"))

        is_owner = guide_owns_tour(tour, user_id) if user_id else False
        is_purchased = await self.purchase_service.has_purchased(user_id, tour.id) if user_id else False

        if not is_owner and not tour.is_published:
            raise NotFoundError(resource_type="tour", resource_id=tour_id)

        keypoints = await self.list_keypoints(tour.id)
        if not is_owner and not is_purchased:
            keypoints = keypoints[:1]

        return KeyPointListing(keypoints=keypoints, is_purchased=is_purchased)

    async def list_keypoints(self, tour_id: UUID) -> List[KeyPoint]:
        """Return a tour's keypoints in stored order: display order, then insertion."""
        stmt = (
            select(KeyPoint)
            .where(KeyPoint.tour_id == tour_id)
            .order_by(KeyPoint.order, KeyPoint.sequence)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def _next_sequence(self, tour_id: UUID) -> int:
        stmt = select(func.coalesce(func.max(KeyPoint.sequence), 0)).where(KeyPoint.tour_id == tour_id)
        result = await self.db.execute(stmt)
        return int(result.scalar_one()) + 1

    async def _get_tour_keypoint_or_raise(self, tour_id: UUID, keypoint_id: str) -> KeyPoint:
        keypoint_uuid = parse_id(keypoint_id, "keypoint")
        stmt = select(KeyPoint).where(KeyPoint.id == keypoint_uuid, KeyPoint.tour_id == tour_id)
        result = await self.db.execute(stmt)
        keypoint = result.scalar_one_or_none()
        if not keypoint:
            logger.warning("keypoint_not_found", keypoint_id=keypoint_id, tour_id=str(tour_id))
            raise NotFoundError(resource_type="keypoint", resource_id=keypoint_id)
        return keypoint
