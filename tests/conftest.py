"""
Pytest configuration and fixtures
"""

import json
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import create_engine, create_session_factory
from models.base import Base
from models.vendor import Vendor, VendorFeed
from typing import AsyncGenerator


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'lockers_test.db'}")

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_vendor(db_session):
    """Insert a vendor with feeds given as [(feed_key, url), ...]"""

    async def _make(code, name=None, feeds=None, api_url=None, active=True):
        vendor = Vendor(code=code, name=name or code.title(), active=active, api_url=api_url)
        vendor.feeds = [
            VendorFeed(url=url, feed_key=feed_key, position=position)
            for position, (feed_key, url) in enumerate(feeds or [])
        ]
        db_session.add(vendor)
        await db_session.commit()
        return vendor

    return _make


@pytest.fixture
def foxpost_payload():
    """Two Foxpost automats, one with comma decimal coordinates"""
    return json.dumps([
        {
            "place_id": 1001,
            "name": "Foxpost Allee",
            "address": "1117 Budapest, Október huszonharmadika u. 8-10.",
            "zip": "1117",
            "city": "Budapest",
            "street": "Október huszonharmadika u. 8-10.",
            "geolat": 47.4750,
            "geolng": 19.0490,
            "apmType": "Rollkon",
            "open": {"hetfo": "00:00-24:00", "kedd": "00:00-24:00"},
            "paymentOptions": ["card", "app"],
        },
        {
            "place_id": "1002",
            "name": "Foxpost Arena",
            "zip": "1087",
            "city": "Budapest",
            "street": "Kerepesi út 9.",
            "geolat": "47,4980",
            "geolng": "19,0930",
            "apmType": "unknown-kind",
        },
    ]).encode("utf-8")


@pytest.fixture
def gls_payload():
    """One GLS parcel locker and one parcel shop"""
    def _payload(prefix="HU"):
        return json.dumps({
            "items": [
                {
                    "id": "42",
                    "name": f"GLS Locker {prefix}",
                    "type": "parcel-locker",
                    "location": [47.5, 19.04],
                    "contact": {"address": "Fő utca 1.", "city": "Budapest", "postalCode": "1011", "countryCode": prefix},
                },
                {
                    "id": "43",
                    "name": f"GLS Shop {prefix}",
                    "type": "parcel-shop",
                    "lat": 47.51,
                    "lng": 19.05,
                    "contact": {"address": "Fő utca 2.", "city": "Budapest", "postalCode": "1011", "countryCode": prefix},
                },
            ]
        }).encode("utf-8")

    return _payload
