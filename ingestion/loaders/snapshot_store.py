"""
Append-only store of raw vendor payloads
"""

import hashlib
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.clock import utcnow
from core.exceptions import PersistenceError
from models.payload_snapshot import PayloadSnapshot
import logging

logger = logging.getLogger(__name__)


def content_hash(raw: bytes) -> str:
    """SHA-256 hex digest of a payload"""
    return hashlib.sha256(raw).hexdigest()


class PayloadSnapshotStore:
    """
    Persist raw fetched payloads for audit and replay.

    Each save inserts a new row and commits at once, so the payload survives
    a later parse or load failure of the same sync.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def save(self, vendor_id: int, raw: bytes) -> PayloadSnapshot:
        """
        Insert an immutable snapshot of raw bytes.

        Raises:
            PersistenceError: If the insert fails
        """
        snapshot = PayloadSnapshot(
            vendor_id=vendor_id,
            content_hash=content_hash(raw),
            payload=raw,
            size_bytes=len(raw),
            stored_at=utcnow(),
        )

        try:
            self.db.add(snapshot)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "Failed to store payload snapshot",
                context={
                    "operation": "INSERT",
                    "table_name": PayloadSnapshot.__tablename__,
                    "vendor_id": vendor_id,
                },
                original_exception=e
            )

        logger.debug(f"Stored {len(raw)} byte snapshot {snapshot.content_hash[:12]} for vendor {vendor_id}")
        return snapshot

    async def prune(self, older_than_days: int, now: Optional[datetime] = None) -> int:
        """
        Delete snapshots stored more than older_than_days ago.

        A non-positive value disables pruning.

        Returns:
            Number of rows deleted
        """
        if older_than_days <= 0:
            return 0

        cutoff = (now or utcnow()) - timedelta(days=older_than_days)

        try:
            result = await self.db.execute(
                delete(PayloadSnapshot)
                .where(PayloadSnapshot.stored_at < cutoff)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                "Failed to prune payload snapshots",
                context={
                    "operation": "DELETE",
                    "table_name": PayloadSnapshot.__tablename__,
                    "older_than_days": older_than_days,
                },
                original_exception=e
            )

        deleted = result.rowcount or 0
        logger.info(f"Pruned {deleted} payload snapshots older than {older_than_days} days")
        return deleted
