"""Tour service for authoring and publication."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import commit_or_raise
from ..core.exceptions import NotFoundError
from ..core.observability import get_logger
from ..models import Tour, TourStatus
from ..models.tour import utcnow
from ..schemas.tour import CreateTourRequest, PublishTourRequest
from .authorization import guide_owns_tour, parse_id, require_tour_owner

logger = get_logger(__name__)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a draft tour owned by the requesting guide.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity, unpublished with price 0
        """
        tour = Tour(
            guide_id=request.guide_id,
            name=request.name,
            description=request.description,
            difficulty=request.difficulty,
            tags=list(request.tags),
            status=TourStatus.DRAFT,
            price=0.0,
            is_published=False,
        )

        self.db.add(tour)
        await commit_or_raise(self.db, "tour")

        logger.info("tour_created", tour_id=str(tour.id), guide_id=tour.guide_id, name=tour.name)
        return tour

    async def list_tours(self, published_only: bool = True, user_id: Optional[str] = None) -> List[Tour]:
        """List published tours, or one guide's tours when published_only is off."""
        if not published_only and user_id:
            return await self.list_tours_by_guide(user_id)
        return await self.list_published_tours()

    async def list_published_tours(self) -> List[Tour]:
        stmt = select(Tour).where(Tour.is_published.is_(True)).order_by(Tour.created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_tours_by_guide(self, guide_id: str) -> List[Tour]:
        stmt = select(Tour).where(Tour.guide_id == guide_id).order_by(Tour.created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_tour(self, tour_id: str, user_id: Optional[str] = None) -> Tour:
        """
        Get a tour as seen by the caller.

        Drafts are visible only to their guide; anyone else gets NotFound.

        Raises:
            NotFoundError: If the tour is absent or not visible to the caller
        """
        tour = await self.get_tour_by_id_or_raise(parse_id(tour_id, "tour"))
        if not tour.is_published and not guide_owns_tour(tour, user_id):
            raise NotFoundError(resource_type="tour", resource_id=tour_id)
        return tour

    async def publish_tour(self, request: PublishTourRequest) -> Tour:
        """
        Publish a tour at the given price.

        Re-publishing an already published tour updates its price. Cart lines
        added earlier keep the price they were added at.

        Raises:
            NotFoundError: If tour not found
            UnauthorizedError: If the guide does not own the tour
        """
        tour = await self.get_tour_by_id_or_raise(parse_id(request.tour_id, "tour"))
        require_tour_owner(tour, request.guide_id)

        tour.is_published = True
        tour.status = TourStatus.PUBLISHED
        tour.price = request.price
        tour.published_at = utcnow()

        await commit_or_raise(self.db, "tour")

        logger.info("tour_published", tour_id=str(tour.id), guide_id=tour.guide_id, price=tour.price)
        return tour

    async def get_tour_by_id(self, tour_id: UUID) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning("tour_not_found", tour_id=str(tour_id))
            raise NotFoundError(resource_type="tour", resource_id=str(tour_id))
        return tour
