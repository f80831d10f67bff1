"""Purchase token ledger: minting and the proof-of-purchase predicate."""

import secrets
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import PersistenceError
from ..models import PurchaseToken


class PurchaseService:
    """Service for the purchase token ledger."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _generate_token(self) -> str:
        """Generate a random opaque purchase token."""
        return secrets.token_urlsafe(32)

    async def mint_token(self, tourist_id: str, tour_id: UUID) -> PurchaseToken:
        """
        Write one token inside a savepoint.

        A failure rolls back only this token; earlier tokens in the same
        transaction survive.

        Raises:
            PersistenceError: If the store rejects the token
        """
        token = PurchaseToken(
            tourist_id=tourist_id,
            tour_id=tour_id,
            token=self._generate_token(),
        )
        try:
            async with self.db.begin_nested():
                self.db.add(token)
        except SQLAlchemyError as e:
            raise PersistenceError(detail="Failed to persist purchase token", operation="mint_token") from e
        return token

    async def has_purchased(self, tourist_id: str, tour_id: UUID) -> bool:
        """Return True if any token exists for the (tourist, tour) pair."""
        stmt = select(
            exists().where(
                PurchaseToken.tourist_id == tourist_id,
                PurchaseToken.tour_id == tour_id,
            )
        )
        result = await self.db.execute(stmt)
        return bool(result.scalar())
