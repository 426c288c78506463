"""
API endpoint tests
"""

import httpx
import pytest
import pytest_asyncio
from datetime import timedelta
from api.main import create_app
from core.clock import utcnow
from core.config import settings
from ingestion.loaders.reconciler import LocationReconciler
from models.base import SyncStatus
from models.sync_run import SyncRun
from schemas.location import NormalizedLocation


@pytest_asyncio.fixture
async def client(session_factory):
    """Test client bound to the SQLite test database"""
    app = create_app(session_factory=session_factory, enable_scheduler=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client


@pytest_asyncio.fixture
async def seeded(db_session, make_vendor):
    """Two vendors, four active locations and one inactive one"""
    foxpost = await make_vendor("foxpost", name="Foxpost")
    gls = await make_vendor("gls", name="GLS")
    await make_vendor("sameday", name="Sameday", active=False)
    reconciler = LocationReconciler(db_session)

    rows = [
        (foxpost.id, NormalizedLocation(vendor_location_id="F1", name="Foxpost Allee", lat=47.475, lon=19.049,
                                         city="Budapest", postcode="1117", services={"available_24_7": True})),
        (foxpost.id, NormalizedLocation(vendor_location_id="F2", name="Foxpost Szeged", lat=46.253, lon=20.141,
                                         city="Szeged", postcode="6720", status="out_of_service")),
        (gls.id, NormalizedLocation(vendor_location_id="G1", name="GLS Shop Deak", lat=47.497, lon=19.054,
                                     type="parcel_shop", address_line="Deak ter 1.", city="Budapest")),
        (gls.id, NormalizedLocation(vendor_location_id="G2", name="GLS Locker Debrecen", lat=47.531, lon=21.624,
                                     city="Debrecen")),
        (gls.id, NormalizedLocation(vendor_location_id="G3", name="GLS Closed", lat=47.49, lon=19.05,
                                     city="Budapest")),
    ]
    for vendor_id, record in rows:
        await reconciler.upsert(vendor_id, record)
    await reconciler.upsert(gls.id, rows[-1][1], seen_at=utcnow() - timedelta(days=30))
    await reconciler.mark_inactive_by_vendor(gls.id, 7)
    await db_session.commit()

    return {"foxpost": foxpost.id, "gls": gls.id}


def ids(response):
    return [item["vendor_location_id"] for item in response.json()["items"]]


class TestLockersEndpoint:
    """Test GET /api/lockers filters"""

    @pytest.mark.asyncio
    async def test_returns_active_locations_ordered_by_id(self, client, seeded):
        response = await client.get("/api/lockers")

        assert response.status_code == 200
        body = response.json()
        assert ids(response) == ["F1", "F2", "G1", "G2"]
        assert body["meta"] == {"count": 4, "limit": settings.API_DEFAULT_LIMIT}

        first = body["items"][0]
        assert first["vendor_code"] == "foxpost"
        assert first["vendor_name"] == "Foxpost"
        assert first["type"] == "locker"
        assert first["services"] == {"available_24_7": True}

    @pytest.mark.asyncio
    async def test_bbox_filter(self, client, seeded):
        # Budapest only: minLon,minLat,maxLon,maxLat
        response = await client.get("/api/lockers", params={"bbox": "18.9,47.4,19.2,47.6"})

        assert ids(response) == ["F1", "G1"]

    @pytest.mark.asyncio
    async def test_malformed_bbox_is_ignored(self, client, seeded):
        response = await client.get("/api/lockers", params={"bbox": "18.9,47.4"})

        assert len(ids(response)) == 4

    @pytest.mark.asyncio
    async def test_non_numeric_bbox_rejected(self, client, seeded):
        response = await client.get("/api/lockers", params={"bbox": "a,b,c,d"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_vendor_type_status_lists(self, client, seeded):
        assert ids(await client.get("/api/lockers", params={"vendor": "gls"})) == ["G1", "G2"]
        assert ids(await client.get("/api/lockers", params={"vendor": "foxpost,gls"})) == ["F1", "F2", "G1", "G2"]
        assert ids(await client.get("/api/lockers", params={"type": "parcel_shop"})) == ["G1"]
        assert ids(await client.get("/api/lockers", params={"status": "out_of_service"})) == ["F2"]
        assert ids(await client.get("/api/lockers", params={"type": "spaceport"})) == []

    @pytest.mark.asyncio
    async def test_text_search(self, client, seeded):
        assert ids(await client.get("/api/lockers", params={"q": "szeged"})) == ["F2"]
        assert ids(await client.get("/api/lockers", params={"q": "Deak"})) == ["G1"]
        assert ids(await client.get("/api/lockers", params={"q": "6720"})) == ["F2"]

    @pytest.mark.asyncio
    async def test_limit_capped(self, client, seeded, monkeypatch):
        monkeypatch.setattr(settings, "API_MAX_RESULTS", 2)

        response = await client.get("/api/lockers", params={"limit": 100})

        assert ids(response) == ["F1", "F2"]
        assert response.json()["meta"]["limit"] == 2


class TestSummaryEndpoints:
    """Test vendor and type counts"""

    @pytest.mark.asyncio
    async def test_vendors_with_active_counts(self, client, seeded):
        response = await client.get("/api/vendors")

        assert response.status_code == 200
        vendors = {v["code"]: v["count"] for v in response.json()["vendors"]}
        assert vendors == {"foxpost": 2, "gls": 2}

    @pytest.mark.asyncio
    async def test_types_with_active_counts(self, client, seeded):
        response = await client.get("/api/types")

        types = response.json()["types"]
        assert types[0] == {"type": "locker", "count": 3}
        assert {"type": "parcel_shop", "count": 1} in types


class TestHealthEndpoint:
    """Test GET /health"""

    @pytest.mark.asyncio
    async def test_healthy_without_runs(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database_connected"] is True
        assert body["status"] == "healthy"
        assert body["last_syncs"] == []

    @pytest.mark.asyncio
    async def test_latest_run_per_vendor(self, client, db_session, seeded):
        started = utcnow()
        db_session.add_all([
            SyncRun(vendor_id=seeded["foxpost"], status=SyncStatus.FAILED, started_at=started, error="old failure"),
            SyncRun(vendor_id=seeded["foxpost"], status=SyncStatus.COMPLETED, started_at=started, created=2),
            SyncRun(vendor_id=seeded["gls"], status=SyncStatus.FAILED, started_at=started, error="GLS API returned HTTP 503"),
        ])
        await db_session.commit()

        body = (await client.get("/health")).json()

        runs = {run["vendor"]: run for run in body["last_syncs"]}
        assert runs["foxpost"]["status"] == "completed"
        assert runs["gls"]["error"] == "GLS API returned HTTP 503"
        assert body["failed_vendors"] == 1
        assert body["status"] == "degraded"


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")

    assert response.json()["endpoints"]["lockers"] == "/api/lockers"
