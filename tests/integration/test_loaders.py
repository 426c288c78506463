"""
Integration tests for the location reconciler and the snapshot store
"""

import pytest
from datetime import timedelta
from sqlalchemy import func, select
from core.clock import utcnow
from ingestion.loaders.reconciler import LocationReconciler
from ingestion.loaders.snapshot_store import PayloadSnapshotStore, content_hash
from models.location import Location
from models.payload_snapshot import PayloadSnapshot
from schemas.location import NormalizedLocation


def record(vendor_location_id="42", **fields):
    values = {"name": "Locker", "lat": 47.5, "lon": 19.05}
    values.update(fields)
    return NormalizedLocation(vendor_location_id=vendor_location_id, **values)


async def location_rows(db_session, vendor_id):
    result = await db_session.execute(
        select(Location).where(Location.vendor_id == vendor_id).order_by(Location.vendor_location_id)
    )
    return list(result.scalars().all())


class TestLocationReconciler:
    """Test upsert idempotency and staleness"""

    @pytest.mark.asyncio
    async def test_upsert_twice_leaves_one_active_row(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        reconciler = LocationReconciler(db_session)

        assert await reconciler.upsert(vendor.id, record()) is True
        await db_session.commit()
        assert await reconciler.upsert(vendor.id, record()) is True
        await db_session.commit()

        rows = await location_rows(db_session, vendor.id)
        assert len(rows) == 1
        assert rows[0].active is True

    @pytest.mark.asyncio
    async def test_exists(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        reconciler = LocationReconciler(db_session)

        assert await reconciler.exists(vendor.id, "42") is False
        await reconciler.upsert(vendor.id, record())
        assert await reconciler.exists(vendor.id, "42") is True

    @pytest.mark.asyncio
    async def test_update_overwrites_fields_and_reactivates(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        reconciler = LocationReconciler(db_session)
        first_seen = utcnow() - timedelta(days=20)

        await reconciler.upsert(vendor.id, record(city="Budapest"), seen_at=first_seen)
        await reconciler.mark_inactive_by_vendor(vendor.id, 7)
        await db_session.commit()

        await reconciler.upsert(vendor.id, record(name="Renamed", city="Debrecen", type="parcel_shop"))
        await db_session.commit()

        row = (await location_rows(db_session, vendor.id))[0]
        assert row.active is True
        assert row.name == "Renamed"
        assert row.city == "Debrecen"
        assert row.type == "parcel_shop"
        assert row.last_seen_at > first_seen
        assert row.created_at == first_seen

    @pytest.mark.asyncio
    async def test_stale_locations_marked_inactive(self, db_session, make_vendor):
        """Seen 8 days ago goes inactive at threshold 7; seen 6 days ago stays"""
        vendor = await make_vendor("foxpost")
        reconciler = LocationReconciler(db_session)
        now = utcnow()

        await reconciler.upsert(vendor.id, record("old"), seen_at=now - timedelta(days=8))
        await reconciler.upsert(vendor.id, record("recent"), seen_at=now - timedelta(days=6))
        await db_session.commit()

        inactivated = await reconciler.mark_inactive_by_vendor(vendor.id, 7, now=now)
        await db_session.commit()

        assert inactivated == 1
        rows = {row.vendor_location_id: row for row in await location_rows(db_session, vendor.id)}
        assert rows["old"].active is False
        assert rows["old"].last_updated_at == now
        assert rows["recent"].active is True

    @pytest.mark.asyncio
    async def test_mark_inactive_is_scoped_to_vendor(self, db_session, make_vendor):
        foxpost = await make_vendor("foxpost")
        gls = await make_vendor("gls")
        reconciler = LocationReconciler(db_session)
        long_ago = utcnow() - timedelta(days=30)

        await reconciler.upsert(foxpost.id, record(), seen_at=long_ago)
        await reconciler.upsert(gls.id, record(), seen_at=long_ago)
        await db_session.commit()

        assert await reconciler.mark_inactive_by_vendor(foxpost.id, 7) == 1
        assert await reconciler.mark_inactive_by_vendor(foxpost.id, 7) == 0
        await db_session.commit()

        assert (await location_rows(db_session, gls.id))[0].active is True


class TestPayloadSnapshotStore:
    """Test raw payload snapshots"""

    @pytest.mark.asyncio
    async def test_save_stores_hash_and_bytes(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        raw = b'[{"place_id": 1}]'

        snapshot = await PayloadSnapshotStore(db_session).save(vendor.id, raw)

        assert snapshot.id is not None
        assert snapshot.content_hash == content_hash(raw)
        assert len(snapshot.content_hash) == 64
        assert snapshot.size_bytes == len(raw)

    @pytest.mark.asyncio
    async def test_same_bytes_twice_gives_two_rows(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        store = PayloadSnapshotStore(db_session)

        await store.save(vendor.id, b"same")
        await store.save(vendor.id, b"same")

        count = await db_session.scalar(select(func.count()).select_from(PayloadSnapshot))
        assert count == 2

    @pytest.mark.asyncio
    async def test_prune_removes_only_old_snapshots(self, db_session, make_vendor):
        vendor = await make_vendor("foxpost")
        store = PayloadSnapshotStore(db_session)

        old = await store.save(vendor.id, b"old")
        old.stored_at = utcnow() - timedelta(days=31)
        await db_session.commit()
        await store.save(vendor.id, b"new")

        assert await store.prune(30) == 1
        assert await store.prune(0) == 0

        remaining = await db_session.execute(select(PayloadSnapshot.payload))
        assert remaining.scalars().all() == [b"new"]
