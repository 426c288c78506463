"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from core.clock import utcnow
from models.base import LocationStatus, LocationType, SyncStatus


# ============================================================================
# Locker Schemas
# ============================================================================

class LocationResponse(BaseModel):
    """One active location as served to map clients"""
    id: int
    vendor_location_id: str
    name: str
    type: LocationType
    status: LocationStatus
    address_line: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: str
    lat: float
    lon: float
    services: Optional[Dict[str, Any]] = None
    opening_hours: Optional[str] = None
    vendor_code: str
    vendor_name: str
    last_seen_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=True)


class LockerListMeta(BaseModel):
    count: int
    limit: int


class LockerListResponse(BaseModel):
    """Response of GET /api/lockers"""
    items: List[LocationResponse]
    meta: LockerListMeta


class VendorCount(BaseModel):
    """Active vendor with its number of active locations"""
    id: int
    code: str
    name: str
    count: int


class VendorListResponse(BaseModel):
    vendors: List[VendorCount]


class TypeCount(BaseModel):
    type: LocationType
    count: int

    model_config = ConfigDict(use_enum_values=True)


class TypeListResponse(BaseModel):
    types: List[TypeCount]


# ============================================================================
# Health Check Schemas
# ============================================================================

class SyncRunInfo(BaseModel):
    """Latest sync run of a vendor for health check"""
    vendor: str
    status: SyncStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    created: int = 0
    updated: int = 0
    inactivated: int = 0
    error: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=utcnow)
    database_connected: bool
    last_syncs: List[SyncRunInfo] = Field(default_factory=list)
    total_vendors: int = 0
    failed_vendors: int = 0

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.total_vendors == 0 or self.failed_vendors == 0:
            self.status = "healthy"
        elif self.failed_vendors < self.total_vendors:
            self.status = "degraded"
        else:
            self.status = "unhealthy"
        return self
