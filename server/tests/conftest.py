"""Test configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guided_tours.core.database import Base
from guided_tours.core.dependencies import get_db
from guided_tours.models import *  # noqa: F403 - Import all models
from guided_tours.schemas.tour import AddKeyPointRequest, CreateTourRequest, PublishTourRequest
from guided_tours.services.keypoint_service import KeyPointService
from guided_tours.services.purchase_service import PurchaseService
from guided_tours.services.tour_service import TourService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

GUIDE_ID = "guide-1"
TOURIST_ID = "tourist-1"

# Keypoints of the sample tour: 0.001 degrees of latitude apart (~111 m)
SAMPLE_KEYPOINTS = [
    {"name": "Old Town Gate", "latitude": 0.001, "longitude": 0.0},
    {"name": "Cathedral Square", "latitude": 0.002, "longitude": 0.0},
    {"name": "River Bridge", "latitude": 0.003, "longitude": 0.0},
]


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_engine, test_session, monkeypatch):
    """Create the application wired to the test database."""
    from guided_tours import main
    from guided_tours.main import create_app

    # Readiness probes the module-level engine
    monkeypatch.setattr(main, "engine", test_engine)

    # ASGITransport does not run the lifespan, so no tracing setup or create_all here
    app = create_app()

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def guide_id():
    return GUIDE_ID


@pytest.fixture
def tourist_id():
    return TOURIST_ID


@pytest.fixture
def sample_tour_data():
    """Sample tour data for testing."""
    return {
        "guide_id": GUIDE_ID,
        "name": "Old Town Walk",
        "description": "A short walk through the historic centre",
        "difficulty": "easy",
        "tags": ["history", "walking"],
    }


@pytest_asyncio.fixture
async def draft_tour(test_session, sample_tour_data):
    """An unpublished tour with the sample keypoints."""
    tour = await TourService(test_session).create_tour(CreateTourRequest(**sample_tour_data))

    keypoint_service = KeyPointService(test_session)
    for order, keypoint in enumerate(SAMPLE_KEYPOINTS):
        await keypoint_service.add_keypoint(
            AddKeyPointRequest(tour_id=str(tour.id), guide_id=GUIDE_ID, order=order, **keypoint)
        )

    return tour


@pytest_asyncio.fixture
async def published_tour(test_session, draft_tour):
    """The sample tour, published at 25.0."""
    return await TourService(test_session).publish_tour(
        PublishTourRequest(tour_id=str(draft_tour.id), guide_id=GUIDE_ID, price=25.0)
    )


@pytest_asyncio.fixture
async def purchased_tour(test_session, published_tour):
    """The published sample tour with a purchase token held by the sample tourist."""
    await PurchaseService(test_session).mint_token(TOURIST_ID, published_tour.id)
    await test_session.commit()
    return published_tour


@pytest_asyncio.fixture
async def tour_keypoints(test_session, published_tour):
    """Keypoints of the sample tour in stored order."""
    return await KeyPointService(test_session).list_keypoints(published_tour.id)
