from sqlalchemy import Column, BigInteger, Integer, String, LargeBinary, DateTime, ForeignKey, Index
from core.clock import utcnow
from models.base import Base


class PayloadSnapshot(Base):
    """
    Raw vendor payload exactly as fetched.

    Purpose:
    - Immutable audit trail
    - Replaying a parse after an adapter fix
    - Spotting unchanged feeds by content hash

    Append-only. The hash identifies a payload but is not unique: the same
    bytes fetched twice produce two rows.
    """
    __tablename__ = "vendor_payload_snapshots"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    content_hash = Column(String(64), nullable=False, index=True)  # SHA-256 hex
    payload = Column(LargeBinary, nullable=False)
    size_bytes = Column(Integer, nullable=False, default=0)

    stored_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        Index("idx_snapshot_vendor_stored", "vendor_id", "stored_at"),
    )
