"""Position simulator: the last coordinate each tourist reported."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import commit_or_raise
from ..core.exceptions import NotFoundError
from ..core.observability import get_logger
from ..models import Position
from ..models.tour import utcnow

logger = get_logger(__name__)


class PositionService:
    """Service for simulated tourist positions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def update_position(self, tourist_id: str, latitude: float, longitude: float) -> Position:
        """Upsert the tourist's current position."""
        position = await self._get_position(tourist_id)
        if position is None:
            position = Position(tourist_id=tourist_id, latitude=latitude, longitude=longitude)
            self.db.add(position)
            try:
                await self.db.commit()
            except IntegrityError:
                # Lost the insert race; update the winner's row instead
                await self.db.rollback()
                position = await self._get_position(tourist_id)
                self._move(position, latitude, longitude)
                await commit_or_raise(self.db, "position")
        else:
            self._move(position, latitude, longitude)
            await commit_or_raise(self.db, "position")

        logger.info("position_updated", tourist_id=tourist_id, latitude=latitude, longitude=longitude)
        return position

    async def get_current_position(self, tourist_id: str) -> Position:
        """
        Get the last reported position.

        Raises:
            NotFoundError: If the tourist never reported one
        """
        position = await self._get_position(tourist_id)
        if position is None:
            raise NotFoundError(resource_type="position", resource_id=tourist_id)
        return position

    async def _get_position(self, tourist_id: str) -> Position | None:
        stmt = select(Position).where(Position.tourist_id == tourist_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _move(position: Position, latitude: float, longitude: float) -> None:
        position.latitude = latitude
        position.longitude = longitude
        position.updated_at = utcnow()
