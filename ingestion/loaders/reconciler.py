"""
Merge normalized locations into the store with upsert logic (idempotency)
and retire locations that stopped appearing in vendor feeds.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.clock import utcnow
from core.exceptions import PersistenceError
from models.location import Location
from schemas.location import NormalizedLocation
import logging

logger = logging.getLogger(__name__)

# Columns overwritten when an existing location is seen again
MUTABLE_COLUMNS = (
    "name",
    "type",
    "status",
    "address_line",
    "city",
    "postcode",
    "country",
    "lat",
    "lon",
    "services",
    "opening_hours",
)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class LocationReconciler:
    """
    Sole writer of Location rows.

    Ensures:
    - Exactly one row per (vendor_id, vendor_location_id)
    - Re-ingestion updates in place and reactivates the row
    - Rows are only ever soft-deleted (active=False)
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise PersistenceError(
                f"Upsert is not supported on dialect {dialect}",
                context={"dialect": dialect}
            )

    async def exists(self, vendor_id: int, vendor_location_id: str) -> bool:
        """Whether a row exists for the natural key"""
        try:
            result = await self.db.execute(
                select(Location.id).where(
                    Location.vendor_id == vendor_id,
                    Location.vendor_location_id == vendor_location_id
                )
            )
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to look up location",
                context={
                    "operation": "SELECT",
                    "table_name": Location.__tablename__,
                    "vendor_id": vendor_id,
                    "vendor_location_id": vendor_location_id,
                },
                original_exception=e
            )
        return result.first() is not None

    async def upsert(
        self,
        vendor_id: int,
        record: NormalizedLocation,
        seen_at: Optional[datetime] = None
    ) -> bool:
        """
        Insert or update one location (INSERT ON CONFLICT UPDATE).

        An existing row gets every mutable field overwritten, last_seen_at and
        last_updated_at bumped and active forced back to True. The caller
        commits.

        Returns:
            True if the statement affected a row

        Raises:
            PersistenceError: If the statement fails
        """
        now = seen_at or utcnow()
        values = {
            "vendor_id": vendor_id,
            "vendor_location_id": record.vendor_location_id,
            "name": record.name,
            "type": record.type,
            "status": record.status,
            "address_line": record.address_line,
            "city": record.city,
            "postcode": record.postcode,
            "country": record.country,
            "lat": record.lat,
            "lon": record.lon,
            "services": record.services or None,
            "opening_hours": record.opening_hours,
            "active": True,
            "last_seen_at": now,
            "last_updated_at": now,
            "created_at": now,
        }

        stmt = self._insert()(Location).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["vendor_id", "vendor_location_id"],
            set_={
                **{column: getattr(stmt.excluded, column) for column in MUTABLE_COLUMNS},
                "active": True,
                "last_seen_at": stmt.excluded.last_seen_at,
                "last_updated_at": stmt.excluded.last_updated_at,
            }
        )

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to upsert location",
                context={
                    "operation": "UPSERT",
                    "table_name": Location.__tablename__,
                    "vendor_id": vendor_id,
                    "vendor_location_id": record.vendor_location_id,
                },
                original_exception=e
            )

        return (result.rowcount or 0) > 0

    async def mark_inactive_by_vendor(
        self,
        vendor_id: int,
        threshold_days: int,
        now: Optional[datetime] = None
    ) -> int:
        """
        Deactivate a vendor's active locations not seen for threshold_days.

        Returns:
            Number of rows flipped to inactive

        Raises:
            PersistenceError: If the update fails
        """
        now = now or utcnow()
        cutoff = now - timedelta(days=threshold_days)

        stmt = (
            update(Location)
            .where(
                Location.vendor_id == vendor_id,
                Location.active.is_(True),
                Location.last_seen_at < cutoff
            )
            .values(active=False, last_updated_at=now)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to mark stale locations inactive",
                context={
                    "operation": "UPDATE",
                    "table_name": Location.__tablename__,
                    "vendor_id": vendor_id,
                    "threshold_days": threshold_days,
                },
                original_exception=e
            )

        inactivated = result.rowcount or 0
        if inactivated:
            logger.info(
                f"Marked {inactivated} locations inactive for vendor {vendor_id} "
                f"(not seen for {threshold_days} days)"
            )
        return inactivated
