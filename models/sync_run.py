from sqlalchemy import Column, BigInteger, Integer, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from core.clock import utcnow
from models.base import Base, SyncStatus, enum_column_type


class SyncRun(Base):
    """
    One row per (vendor, sync attempt).

    Purpose:
    - Audit trail of every sync
    - Error tracking and debugging

    Created as running, terminated exactly once as completed or failed, and
    never touched again.
    """
    __tablename__ = "sync_runs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    status = Column(enum_column_type(SyncStatus, "sync_status"), nullable=False, default=SyncStatus.RUNNING, index=True)

    # Timestamps
    started_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    ended_at = Column(DateTime, nullable=True)

    # Statistics
    created = Column(Integer, nullable=False, default=0)
    updated = Column(Integer, nullable=False, default=0)
    inactivated = Column(Integer, nullable=False, default=0)

    # Error tracking
    error = Column(Text, nullable=True)

    vendor = relationship("Vendor")

    __table_args__ = (
        Index("idx_sync_run_vendor_started", "vendor_id", "started_at"),
    )
