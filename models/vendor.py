from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from core.clock import utcnow
from models.base import Base


class Vendor(Base):
    """
    A delivery network provider.

    `code` is the stable identifier used to pick the adapter (e.g. "foxpost",
    "gls_cz"). `api_url` is only consulted when the vendor has no feed rows.
    """
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    active = Column(Boolean, nullable=False, default=True, index=True)

    # Legacy single-feed URL
    api_url = Column(String(2048), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    feeds = relationship(
        "VendorFeed",
        back_populates="vendor",
        order_by="VendorFeed.position",
        cascade="all, delete-orphan",
    )


class VendorFeed(Base):
    """
    One feed URL of a vendor.

    Vendors served by one adapter across several regions have one row per
    region; `feed_key` namespaces the location ids of that region. An empty
    feed_key means the vendor has a single feed.
    """
    __tablename__ = "vendor_feeds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(2048), nullable=False)
    feed_key = Column(String(50), nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)

    vendor = relationship("Vendor", back_populates="feeds")

    __table_args__ = (
        Index("idx_vendor_feed_key", "vendor_id", "feed_key", unique=True),
    )
