"""Pytest fixtures for the Zeyra backend tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from zeyra.config import get_settings
from zeyra.database import Base, get_db
from zeyra.exceptions import UpstreamError
from zeyra.main import app
from zeyra.rate_limit import limiter
from zeyra.routers.sync import get_cqc_client
from zeyra.services.cqc_client import CQCClient
from zeyra.services.cqc_sync import CQCSyncService
from zeyra.services.throttle import RequestThrottle

# Test database URL - in-memory SQLite shared through a single connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


class FakeCQC:
    """
    In-memory stand-in for the CQC API.

    ``details`` maps location id to detail payload; ids in ``failing`` raise
    UpstreamError. ``change_pages[N - 1]`` holds the ids returned for changes
    page N.
    """

    def __init__(self):
        self.details: dict[str, dict[str, Any]] = {}
        self.failing: set[str] = set()
        self.listing_total_pages = 1
        self.change_pages: list[list[str]] = [[]]
        self.changes_error: Exception | None = None

    async def list_locations(self, page=1, per_page=50, regulated_activity=None):
        ids = list(self.details) + sorted(self.failing)
        return {
            "total": len(ids),
            "page": page,
            "perPage": per_page,
            "totalPages": self.listing_total_pages,
            "locations": [{"locationId": loc_id} for loc_id in ids],
        }

    async def get_location(self, location_id):
        if location_id in self.failing:
            raise UpstreamError(404, "Not Found")
        return self.details[location_id]

    async def list_changes(self, start, end, page=1, per_page=1000):
        if self.changes_error is not None:
            raise self.changes_error
        return {
            "total": sum(len(p) for p in self.change_pages),
            "page": page,
            "perPage": per_page,
            "totalPages": len(self.change_pages) if any(self.change_pages) else 0,
            "changes": self.change_pages[page - 1] if page <= len(self.change_pages) else [],
        }


@pytest.fixture
def fake_cqc() -> FakeCQC:
    return FakeCQC()


@pytest.fixture
def mock_cqc_client(fake_cqc) -> MagicMock:
    """CQCClient mock whose calls are answered by FakeCQC (and recorded)."""
    client = MagicMock(spec=CQCClient)
    client.list_locations = AsyncMock(side_effect=fake_cqc.list_locations)
    client.get_location = AsyncMock(side_effect=fake_cqc.get_location)
    client.list_changes = AsyncMock(side_effect=fake_cqc.list_changes)
    return client


@pytest.fixture
def sync_service(db_session, mock_cqc_client) -> CQCSyncService:
    """Sync service with no pacing delay."""
    return CQCSyncService(db_session, mock_cqc_client, throttle=RequestThrottle(0))


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, mock_cqc_client, monkeypatch
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database and CQC client overrides."""

    async def override_get_db():
        yield db_session

    monkeypatch.setattr(get_settings(), "cqc_request_delay_ms", 0)
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cqc_client] = lambda: mock_cqc_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


def make_location(
    location_id: str,
    name: str = "Example Hospital",
    location_type: str = "NHS Healthcare Organisation",
    **overrides: Any,
) -> dict[str, Any]:
    """Build a CQC location detail payload."""
    payload = {
        "locationId": location_id,
        "providerId": "RX1",
        "name": name,
        "type": location_type,
        "postalAddressLine1": "1 Hospital Road",
        "postalAddressLine2": "",
        "postalAddressTownCity": "Leeds",
        "postalAddressCounty": "West Yorkshire",
        "postalCode": "LS1 3EX",
        "region": "Yorkshire and The Humber",
        "localAuthority": "Leeds",
        "onspdLatitude": 53.8,
        "onspdLongitude": -1.55,
        "mainPhoneNumber": "0113 243 2799",
        "website": "www.example.nhs.uk",
        "odsCode": "RR801",
        "registrationStatus": "Registered",
        "lastInspection": {"date": "2023-05-10"},
        "currentRatings": {
            "overall": {
                "rating": "Good",
                "reportDate": "2023-06-01",
                "keyQuestionRatings": [
                    {"name": "Safe", "rating": "Requires improvement"},
                    {"name": "Effective", "rating": "Good"},
                    {"name": "Caring", "rating": "Outstanding"},
                    {"name": "Responsive", "rating": "Good"},
                    {"name": "Well-led", "rating": "Good"},
                ],
            },
            "serviceRatings": [
                {"name": "Urgent and emergency services", "rating": "Good", "reportDate": "2023-06-01"},
                {"name": "Maternity", "rating": "Inadequate", "reportDate": "2023-06-01"},
            ],
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def sample_location() -> dict[str, Any]:
    """Sample location detail payload from the CQC API."""
    return make_location("1-100000001", name="Leeds General Infirmary")


@pytest.fixture
def sample_datetime() -> datetime:
    """Sample datetime for testing."""
    return datetime(2024, 1, 18, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def location_factory():
    """Factory for CQC location detail payloads."""
    return make_location
