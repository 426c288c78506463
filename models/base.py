from sqlalchemy import JSON, Enum
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
import enum

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ============================================================================
# ENUMS
# ============================================================================

class LocationType(str, enum.Enum):
    """Canonical location types"""
    LOCKER = "locker"
    PARCEL_SHOP = "parcel_shop"
    PICKUP_POINT = "pickup_point"
    DROPOFF_POINT = "dropoff_point"


class LocationStatus(str, enum.Enum):
    """Canonical operational status reported by the vendor"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_SERVICE = "out_of_service"


class SyncStatus(str, enum.Enum):
    """Sync run status"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def enum_column_type(enum_cls, name: str) -> Enum:
    """Enum column storing member values rather than names"""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
