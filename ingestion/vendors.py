"""
Vendor and feed lookups used by the sync job.
"""

from dataclasses import dataclass
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import ConfigurationError, PersistenceError
from models.vendor import Vendor, VendorFeed


@dataclass(frozen=True)
class FeedSpec:
    """One URL to pull for a vendor; feed_key namespaces its location ids"""
    url: str
    feed_key: str = ""

    def namespace(self, vendor_location_id: str) -> str:
        if not self.feed_key:
            return vendor_location_id
        return f"{self.feed_key}_{vendor_location_id}"


class VendorDirectory:
    """Read-only access to vendors and their feeds"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def find_all_active(self) -> List[Vendor]:
        try:
            result = await self.db.execute(
                select(Vendor).where(Vendor.active.is_(True)).order_by(Vendor.name)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to list active vendors",
                context={"operation": "SELECT", "table_name": Vendor.__tablename__},
                original_exception=e
            )
        return list(result.scalars().all())

    async def find_by_code(self, code: str) -> Optional[Vendor]:
        try:
            result = await self.db.execute(select(Vendor).where(Vendor.code == code))
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to look up vendor",
                context={"operation": "SELECT", "table_name": Vendor.__tablename__, "code": code},
                original_exception=e
            )
        return result.scalar_one_or_none()

    async def resolve_feeds(self, vendor: Vendor) -> List[FeedSpec]:
        """
        Feed rows of the vendor in position order.

        Falls back to the vendor's single api_url when it has no feed rows.

        Raises:
            ConfigurationError: If the vendor has neither
        """
        try:
            result = await self.db.execute(
                select(VendorFeed)
                .where(VendorFeed.vendor_id == vendor.id)
                .order_by(VendorFeed.position, VendorFeed.id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to load vendor feeds",
                context={"operation": "SELECT", "table_name": VendorFeed.__tablename__, "vendor": vendor.code},
                original_exception=e
            )

        feeds = [FeedSpec(url=row.url, feed_key=row.feed_key or "") for row in result.scalars().all()]
        if feeds:
            return feeds

        if vendor.api_url:
            return [FeedSpec(url=vendor.api_url)]

        raise ConfigurationError(
            f"Vendor {vendor.code} has no feeds configured",
            context={"vendor": vendor.code}
        )
