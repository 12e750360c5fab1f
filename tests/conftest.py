"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from parcelhub.db import Database
from parcelhub.db.models import Handover, HandoverStatus, Parcel, Platform
from parcelhub.services.platform_loader import PlatformRegistry


@pytest.fixture
async def database():
    """Create an in-memory database for testing."""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_all()

    yield database

    await database.dispose()


@pytest.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def platforms():
    registry = PlatformRegistry()
    registry.load_all()
    return registry


@pytest.fixture
async def client(database, platforms):
    """HTTP client talking to an app bound to the test database."""
    from parcelhub.main import create_app

    app = create_app(database=database, platforms=platforms)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def add_handover(db_session):
    """Insert a handover with bare parcels, bypassing deduplication."""

    async def _add(
        platform=Platform.LAZADA,
        tracking_numbers=(),
        handover_date=date(2025, 1, 15),
        **fields,
    ) -> Handover:
        handover = Handover(
            handover_date=handover_date,
            quantity=len(tracking_numbers),
            file_name=fields.pop("file_name", "manifest.xlsx"),
            platform="manual",
            type=platform,
            status=fields.pop("status", HandoverStatus.PENDING),
            **fields,
        )
        handover.parcels = [Parcel(tracking_number=tn) for tn in tracking_numbers]
        db_session.add(handover)
        await db_session.commit()
        return handover

    return _add


@pytest.fixture
def add_parcel(db_session):
    async def _add(tracking_number: str, handover: Handover | None = None, **fields) -> Parcel:
        parcel = Parcel(
            tracking_number=tracking_number,
            handover_id=handover.id if handover else None,
            **fields,
        )
        db_session.add(parcel)
        await db_session.commit()
        return parcel

    return _add
