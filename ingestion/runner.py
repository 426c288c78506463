# ============================================================================
# File: ingestion/runner.py
# Description: Vendor sync orchestrator with per-vendor fault isolation
# ============================================================================
"""
Sync Runner - Orchestrates Fetch, Snapshot, Parse, Reconcile per vendor.

This module provides:
- One SyncRun audit row per vendor sync (running -> completed | failed)
- Sequential processing of a vendor's feeds with feed_key id namespacing
- Accurate created/updated/inactivated counters
- Per-vendor fault isolation in sync_all
"""

import asyncio
from typing import Any, Dict, Optional
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.clock import utcnow
from core.config import settings
from core.exceptions import ConfigurationError, PersistenceError, SyncException
from ingestion.base import VendorAdapter
from ingestion.loaders.reconciler import LocationReconciler
from ingestion.loaders.snapshot_store import PayloadSnapshotStore
from ingestion.retry import Sleep, fetch_with_retry
from ingestion.vendors import FeedSpec, VendorDirectory
from models.base import SyncStatus
from models.location import Location
from models.sync_run import SyncRun
from models.vendor import Vendor

logger = logging.getLogger(__name__)

# Feed-key prefixes are added after validation, so the column width is rechecked
MAX_LOCATION_KEY_LENGTH = Location.__table__.c.vendor_location_id.type.length


def error_message(error: BaseException) -> str:
    if isinstance(error, SyncException):
        return error.message
    return str(error) or type(error).__name__


class SyncOrchestrator:
    """
    Vendor sync orchestrator

    Responsibilities:
    - Drive fetch -> snapshot -> parse -> upsert for every feed of a vendor
    - Retire locations missing from feeds past the inactivity threshold
    - Record every attempt as a SyncRun
    - Keep one vendor's failure from affecting the others
    """

    def __init__(
        self,
        db_session: AsyncSession,
        adapters: Optional[Dict[str, VendorAdapter]] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        inactive_threshold_days: Optional[int] = None,
        snapshot_best_effort: Optional[bool] = None,
        sleep: Sleep = asyncio.sleep
    ):
        self.db = db_session
        self.adapters: Dict[str, VendorAdapter] = dict(adapters or {})
        self.retry_attempts = settings.SYNC_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts
        self.retry_delay = settings.SYNC_RETRY_DELAY if retry_delay is None else retry_delay
        self.inactive_threshold_days = (
            settings.INACTIVE_THRESHOLD_DAYS if inactive_threshold_days is None else inactive_threshold_days
        )
        self.snapshot_best_effort = (
            settings.SNAPSHOT_BEST_EFFORT if snapshot_best_effort is None else snapshot_best_effort
        )
        self.sleep = sleep

        self.directory = VendorDirectory(db_session)
        self.reconciler = LocationReconciler(db_session)
        self.snapshots = PayloadSnapshotStore(db_session)

    def register_adapter(self, code: str, adapter: VendorAdapter) -> None:
        self.adapters[code] = adapter

    async def sync_all(self) -> Dict[str, Dict[str, Any]]:
        """
        Sync every active vendor, one after another.

        A vendor failure is logged and reported in its result entry. Only a
        failure to enumerate vendors propagates.
        """
        vendors = await self.directory.find_all_active()
        # Plain values survive the rollback a failed vendor triggers
        targets = [(vendor.id, vendor.code) for vendor in vendors]

        logger.info(f"Syncing {len(targets)} active vendors")

        results: Dict[str, Dict[str, Any]] = {}
        for vendor_id, code in targets:
            try:
                results[code] = await self._sync(vendor_id, code)
            except Exception as e:
                logger.error(f"Sync failed for vendor {code}: {error_message(e)}")
                results[code] = {"success": False, "error": error_message(e)}

        return results

    async def sync_vendor(self, vendor: Vendor) -> Dict[str, Any]:
        """
        Sync a single vendor.

        Returns:
            {"success": True, "created", "updated", "inactivated", "total"}

        Raises:
            Whatever stopped the sync, after the SyncRun is marked failed
        """
        return await self._sync(vendor.id, vendor.code)

    async def _sync(self, vendor_id: int, code: str) -> Dict[str, Any]:
        logger.info(f"Starting sync for vendor: {code}")

        run_id = await self._start_run(vendor_id)
        created = 0
        updated = 0
        total = 0

        try:
            adapter = self.adapters.get(code)
            if adapter is None:
                raise ConfigurationError(
                    f"No adapter registered for vendor: {code}",
                    context={"vendor": code}
                )

            vendor = await self.db.get(Vendor, vendor_id)
            feeds = await self.directory.resolve_feeds(vendor)

            # --------------------------------------------------
            # PHASE 1: FEEDS (fetch -> snapshot -> parse -> upsert)
            # --------------------------------------------------
            for feed in feeds:
                feed_created, feed_updated, feed_total = await self._sync_feed(
                    vendor_id, code, adapter, feed
                )
                created += feed_created
                updated += feed_updated
                total += feed_total

            # --------------------------------------------------
            # PHASE 2: STALENESS
            # --------------------------------------------------
            inactivated = await self.reconciler.mark_inactive_by_vendor(
                vendor_id, self.inactive_threshold_days
            )

            # --------------------------------------------------
            # PHASE 3: FINALIZE SYNC RUN
            # --------------------------------------------------
            await self.db.execute(
                update(SyncRun)
                .where(SyncRun.id == run_id)
                .values(
                    status=SyncStatus.COMPLETED,
                    ended_at=utcnow(),
                    created=created,
                    updated=updated,
                    inactivated=inactivated
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            await self._fail_run(run_id, error_message(e))
            raise

        logger.info(
            f"Sync completed for vendor: {code} - "
            f"Created: {created}, Updated: {updated}, Inactivated: {inactivated}, Total: {total}"
        )

        return {
            "success": True,
            "created": created,
            "updated": updated,
            "inactivated": inactivated,
            "total": total,
        }

    async def _sync_feed(self, vendor_id: int, code: str, adapter: VendorAdapter, feed: FeedSpec):
        logger.info(f"Fetching {code} feed {feed.feed_key or '(default)'}: {feed.url}")

        raw = await fetch_with_retry(
            adapter, feed.url, self.retry_attempts, self.retry_delay, sleep=self.sleep
        )

        try:
            await self.snapshots.save(vendor_id, raw)
        except PersistenceError as e:
            if not self.snapshot_best_effort:
                raise
            logger.warning(f"Snapshot not stored for {code}, continuing: {e.message}")

        records = adapter.parse(raw)

        created = 0
        updated = 0
        skipped = 0
        seen_at = utcnow()
        for record in records:
            key = feed.namespace(record.vendor_location_id)
            if len(key) > MAX_LOCATION_KEY_LENGTH:
                logger.warning(
                    f"Skipping {code} item: id too long after namespacing "
                    f"(id={record.vendor_location_id[:40]}..., length={len(key)}, max={MAX_LOCATION_KEY_LENGTH})"
                )
                skipped += 1
                continue
            if key != record.vendor_location_id:
                record = record.model_copy(update={"vendor_location_id": key})

            existed = await self.reconciler.exists(vendor_id, key)
            if await self.reconciler.upsert(vendor_id, record, seen_at=seen_at):
                if existed:
                    updated += 1
                else:
                    created += 1

        await self.db.commit()
        total = len(records) - skipped
        logger.info(f"Feed done for {code}: {total} records, {created} created, {updated} updated")
        return created, updated, total

    async def _start_run(self, vendor_id: int) -> int:
        run = SyncRun(vendor_id=vendor_id, status=SyncStatus.RUNNING, started_at=utcnow())
        try:
            self.db.add(run)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "Failed to start sync run",
                context={"operation": "INSERT", "table_name": SyncRun.__tablename__, "vendor_id": vendor_id},
                original_exception=e
            )
        return run.id

    async def _fail_run(self, run_id: int, message: str) -> None:
        try:
            await self.db.execute(
                update(SyncRun)
                .where(SyncRun.id == run_id)
                .values(status=SyncStatus.FAILED, ended_at=utcnow(), error=message)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"Could not mark sync run {run_id} as failed")


async def run_sync_batch(
    session_factory,
    adapters: Optional[Dict[str, VendorAdapter]] = None,
    retention_days: Optional[int] = None
) -> Dict[str, Dict[str, Any]]:
    """
    One complete batch: sync every active vendor, log a summary line per
    vendor, then prune old payload snapshots.

    Raises:
        Any error outside the per-vendor loop (e.g. vendor enumeration)
    """
    if adapters is None:
        from ingestion.adapters import default_adapters
        adapters = default_adapters()

    retention_days = settings.SNAPSHOT_RETENTION_DAYS if retention_days is None else retention_days

    async with session_factory() as session:
        orchestrator = SyncOrchestrator(session, adapters=adapters)
        results = await orchestrator.sync_all()

        for code, result in results.items():
            if result["success"]:
                logger.info(
                    f"{code}: OK - Created: {result['created']}, Updated: {result['updated']}, "
                    f"Inactivated: {result['inactivated']}, Total: {result['total']}"
                )
            else:
                logger.error(f"{code}: FAILED - {result['error']}")

        await PayloadSnapshotStore(session).prune(retention_days)

    return results
