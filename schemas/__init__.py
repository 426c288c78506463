"""
Pydantic schemas for data validation and serialization.

Schemas:
    location: NormalizedLocation, the record every adapter produces
    api: Query API response models

Usage:
    from schemas.location import NormalizedLocation
    from schemas.api import LockerListResponse, HealthCheckResponse

Example:
    record = NormalizedLocation(
        vendor_location_id="42",
        name="Foxpost Allee",
        lat=47.47,
        lon=19.05
    )

    # Defaults apply and blanks become None
    assert record.type == "locker"
    assert record.status == "active"

Validation:
    - Coordinates must fall within [-90, 90] / [-180, 180]
    - Text fields are stripped, empty strings become None
    - Country codes are upper-cased two letter codes
"""

__all__ = [
    "NormalizedLocation",
    "LocationResponse",
    "LockerListResponse",
    "VendorListResponse",
    "TypeListResponse",
    "HealthCheckResponse",
]
