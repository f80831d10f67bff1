"""Database configuration and async session management."""

import logging
from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from .config import settings
from .exceptions import ConflictError, PersistenceError

logger = logging.getLogger(__name__)


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    # Use StaticPool for SQLite in-memory databases (if needed for testing)
    poolclass=StaticPool if "sqlite" in settings.database_url else None,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for all models."""


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function that yields database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def commit_or_raise(session: AsyncSession, resource_type: str) -> None:
    """
    Commit the session, translating store failures into domain errors.

    A version mismatch on a versioned aggregate means another request wrote
    it after we read it; that surfaces as a conflict rather than a lost update.
    A uniqueness violation means a concurrent request inserted the same row
    first, and is reported the same way.

    Raises:
        ConflictError: If a versioned row was modified or inserted concurrently
        PersistenceError: If the store rejected the write
    """
    try:
        await session.commit()
    except StaleDataError as e:
        await session.rollback()
        logger.warning(
            "Stale write rejected",
            extra={"resource_type": resource_type, "error": str(e)}
        )
        raise ConflictError(
            detail=f"The {resource_type} was modified by another request; reload and retry"
        ) from e
    except IntegrityError as e:
        await session.rollback()
        logger.warning(
            "Duplicate write rejected",
            extra={"resource_type": resource_type, "error": str(e)}
        )
        raise ConflictError(
            detail=f"The {resource_type} was written by another request; reload and retry"
        ) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(
            "Commit failed",
            extra={"resource_type": resource_type, "error": str(e)}
        )
        raise PersistenceError(
            detail=f"Failed to persist {resource_type}",
            operation="commit",
        ) from e


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
