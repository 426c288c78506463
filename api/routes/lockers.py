"""
Locker search endpoint with bounding box and attribute filters
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_
from api.dependencies import get_db
from schemas.api import LocationResponse, LockerListMeta, LockerListResponse
from models.location import Location
from models.vendor import Vendor
from models.base import LocationStatus, LocationType
from core.config import settings
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Lockers"])


def split_list(value: Optional[str]) -> List[str]:
    """Comma separated query value to a list without blanks"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def known_values(values: List[str], enum_cls) -> List[str]:
    allowed = {member.value for member in enum_cls}
    return [value for value in values if value in allowed]


def parse_bbox(value: Optional[str]) -> Optional[Tuple[float, float, float, float]]:
    """
    Parse "minLon,minLat,maxLon,maxLat".

    Anything other than four parts is ignored, like an absent bbox.
    """
    parts = split_list(value)
    if len(parts) != 4:
        return None
    try:
        min_lon, min_lat, max_lon, max_lat = (float(p) for p in parts)
    except ValueError:
        raise HTTPException(status_code=422, detail="bbox must hold four numbers")
    return min_lon, min_lat, max_lon, max_lat


@router.get("/lockers", response_model=LockerListResponse)
async def get_lockers(
    bbox: Optional[str] = Query(None, description="minLon,minLat,maxLon,maxLat"),
    vendor: Optional[str] = Query(None, description="Comma separated vendor codes"),
    type: Optional[str] = Query(None, description="Comma separated location types"),
    status: Optional[str] = Query(None, description="Comma separated location statuses"),
    q: Optional[str] = Query(None, description="Search in name, address, city and postcode"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of results"),
    db: AsyncSession = Depends(get_db)
):
    """
    Active locations matching every given filter, ordered by id.

    The limit defaults to API_DEFAULT_LIMIT and is capped at API_MAX_RESULTS.
    """
    limit = min(limit or settings.API_DEFAULT_LIMIT, settings.API_MAX_RESULTS)

    filters = [Location.active.is_(True)]

    box = parse_bbox(bbox)
    if box:
        min_lon, min_lat, max_lon, max_lat = box
        filters.append(Location.lat.between(min_lat, max_lat))
        filters.append(Location.lon.between(min_lon, max_lon))

    vendor_codes = split_list(vendor)
    if vendor_codes:
        filters.append(Vendor.code.in_(vendor_codes))

    types = split_list(type)
    if types:
        # unknown values match nothing
        filters.append(Location.type.in_(known_values(types, LocationType)))

    statuses = split_list(status)
    if statuses:
        filters.append(Location.status.in_(known_values(statuses, LocationStatus)))

    search = (q or "").strip()
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            Location.name.ilike(pattern),
            Location.address_line.ilike(pattern),
            Location.city.ilike(pattern),
            Location.postcode.ilike(pattern)
        ))

    query = (
        select(Location, Vendor.code, Vendor.name)
        .join(Vendor, Location.vendor_id == Vendor.id)
        .where(and_(*filters))
        .order_by(Location.id)
        .limit(limit)
    )

    result = await db.execute(query)

    items = [
        LocationResponse(
            id=location.id,
            vendor_location_id=location.vendor_location_id,
            name=location.name,
            type=location.type,
            status=location.status,
            address_line=location.address_line,
            city=location.city,
            postcode=location.postcode,
            country=location.country,
            lat=location.lat,
            lon=location.lon,
            services=location.services,
            opening_hours=location.opening_hours,
            vendor_code=vendor_code,
            vendor_name=vendor_name,
            last_seen_at=location.last_seen_at,
            last_updated_at=location.last_updated_at
        )
        for location, vendor_code, vendor_name in result.all()
    ]

    logger.info(f"GET /api/lockers returned {len(items)} items (limit {limit})")

    return LockerListResponse(items=items, meta=LockerListMeta(count=len(items), limit=limit))
