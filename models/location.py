from sqlalchemy import Column, BigInteger, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from core.clock import utcnow
from models.base import Base, JSONType, LocationType, LocationStatus, enum_column_type


class Location(Base):
    """
    Canonical, normalized parcel locker / pickup location.

    Natural key: (vendor_id, vendor_location_id). The sync path never deletes
    rows; `active` is the only soft-delete flag and is cleared by the
    staleness pass when a location has not been seen for the grace period.

    Field Mapping Strategy:
    - vendor id (place_id, lockerId, ID, ...) -> vendor_location_id,
      prefixed with "<feed_key>_" for multi-feed vendors
    - vendor type / status strings -> type / status via per-vendor lookups
    - anything vendor-specific (payment, accessibility, 24/7) -> services
    - opening hours are kept as an opaque vendor-encoded string
    """
    __tablename__ = "locations"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # Source tracking
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)
    vendor_location_id = Column(String(255), nullable=False)

    # Core fields
    name = Column(String(255), nullable=False)
    type = Column(enum_column_type(LocationType, "location_type"), nullable=False, default=LocationType.LOCKER)
    status = Column(enum_column_type(LocationStatus, "location_status"), nullable=False, default=LocationStatus.ACTIVE)

    # Position
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)

    # Address
    address_line = Column(String(500), nullable=True)
    city = Column(String(200), nullable=True)
    postcode = Column(String(20), nullable=True)
    country = Column(String(2), nullable=False, default="HU")

    # Vendor-specific attributes
    services = Column(JSONType, nullable=True)
    opening_hours = Column(Text, nullable=True)

    # Lifecycle
    active = Column(Boolean, nullable=False, default=True)
    last_seen_at = Column(DateTime, nullable=False, default=utcnow)
    last_updated_at = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    vendor = relationship("Vendor")

    __table_args__ = (
        Index("idx_location_vendor_key", "vendor_id", "vendor_location_id", unique=True),
        Index("idx_location_lat_lon", "lat", "lon"),
        Index("idx_location_vendor_active", "vendor_id", "active"),
        Index("idx_location_type_status", "type", "status"),
    )
