"""Test configuration and fixtures."""

import os

# Must be set before the application modules create their engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rental_booking.core.config import settings
from rental_booking.core.database import Base
from rental_booking.core.dependencies import get_db
from rental_booking.models import *  # noqa: F403 - Import all models
from rental_booking.schemas.common import Money
from rental_booking.schemas.property import CreatePropertyRequest, PropertyBookingRules
from rental_booking.services.property_service import PropertyService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

GUEST_ID = "guest-1"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

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
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Application with the database dependency bound to the test session."""
    from rental_booking.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_token(subject: str, **claims) -> str:
    """Sign a bearer token the API accepts."""
    return jwt.encode({"sub": subject, **claims}, settings.bearer_token_secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Authorization headers for the default guest."""
    return {"Authorization": f"Bearer {make_token(GUEST_ID)}"}


@pytest.fixture
def headers_for():
    """Build authorization headers for any member."""

    def build(subject: str) -> dict:
        return {"Authorization": f"Bearer {make_token(subject)}"}

    return build


@pytest.fixture
def sample_property_data():
    """Sample property payload for the API."""
    return {
        "title": "Lakeside Cabin",
        "nightly_rate": {"amount": 18500, "currency": "USD"},
        "max_guests": 4,
        "rules": {
            "min_stay_nights": 2,
            "max_stay_nights": 14,
            "lead_time_days": 1,
            "buffer_days": None,
        },
    }


@pytest.fixture
def property_factory(test_session):
    """Create properties directly through the service."""

    async def create(
        title: str = "Test Property",
        nightly_rate: int = 10000,
        max_guests: int | None = 4,
        **rules,
    ):
        return await PropertyService(test_session).create_property(
            CreatePropertyRequest(
                title=title,
                nightly_rate=Money(amount=nightly_rate, currency="USD"),
                max_guests=max_guests,
                rules=PropertyBookingRules(**rules),
            )
        )

    return create
