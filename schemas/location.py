"""
Pydantic schema for the normalized location produced by vendor adapters
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any
from models.base import LocationType, LocationStatus


class NormalizedLocation(BaseModel):
    """
    One parsed vendor record, without vendor_id.

    Ensures:
    - A stable identifier and a name are present
    - Coordinates are within WGS84 bounds
    - Type and status are canonical values
    - Blank optional strings become None
    """

    vendor_location_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    type: LocationType = LocationType.LOCKER
    status: LocationStatus = LocationStatus.ACTIVE

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    address_line: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=200)
    postcode: Optional[str] = Field(None, max_length=20)
    country: str = Field("HU", min_length=2, max_length=2)

    services: Dict[str, Any] = Field(default_factory=dict)
    opening_hours: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("vendor_location_id", "name", mode="before")
    @classmethod
    def strip_required(cls, v):
        if v is None:
            return v
        return str(v).strip()

    @field_validator("address_line", "city", "postcode", "opening_hours", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("country", mode="before")
    @classmethod
    def upper_country(cls, v):
        return str(v).strip().upper() if v is not None else v

    @field_validator("services", mode="before")
    @classmethod
    def ensure_services_dict(cls, v):
        """Ensure services is a dict"""
        if not isinstance(v, dict):
            return {}
        return v
