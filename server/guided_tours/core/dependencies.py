"""FastAPI dependencies for database sessions and request-scoped services."""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..services import CartService, ExecutionService, KeyPointService, PositionService, TourService
from .database import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


DatabaseSession = Depends(get_db)


def get_tour_service(db: AsyncSession = DatabaseSession) -> TourService:
    return TourService(db)


def get_keypoint_service(db: AsyncSession = DatabaseSession) -> KeyPointService:
    return KeyPointService(db)


def get_cart_service(db: AsyncSession = DatabaseSession) -> CartService:
    return CartService(db)


def get_execution_service(db: AsyncSession = DatabaseSession) -> ExecutionService:
    return ExecutionService(db)


def get_position_service(db: AsyncSession = DatabaseSession) -> PositionService:
    return PositionService(db)


TourServiceDependency = Depends(get_tour_service)
KeyPointServiceDependency = Depends(get_keypoint_service)
CartServiceDependency = Depends(get_cart_service)
ExecutionServiceDependency = Depends(get_execution_service)
PositionServiceDependency = Depends(get_position_service)
