"""
SQLAlchemy ORM models for database tables.

This package defines the database schema using SQLAlchemy ORM models:

Models:
    base: Base declarative class and shared enums (LocationType, LocationStatus, SyncStatus)
    vendor: Vendors and their ordered feed URLs
    location: Canonical normalized locations
    sync_run: Per-vendor sync audit trail
    payload_snapshot: Raw fetched payloads keyed by content hash

Database Schema:
    All models inherit from the Base declarative class. Flexible vendor
    attributes are stored as JSONB on PostgreSQL and JSON elsewhere.

Usage:
    from models.location import Location
    from models.base import LocationType, SyncStatus

Relationships:
    - Vendor → VendorFeed (one-to-many, ordered)
    - Vendor → Location (one-to-many)
    - Vendor → SyncRun (one-to-many)
    - Vendor → PayloadSnapshot (one-to-many)
"""

from models.base import Base, LocationType, LocationStatus, SyncStatus
from models.vendor import Vendor, VendorFeed
from models.location import Location
from models.sync_run import SyncRun
from models.payload_snapshot import PayloadSnapshot

__all__ = [
    "Base",
    "LocationType",
    "LocationStatus",
    "SyncStatus",
    "Vendor",
    "VendorFeed",
    "Location",
    "SyncRun",
    "PayloadSnapshot",
]
