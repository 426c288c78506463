"""
Vendor and type summary endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from api.dependencies import get_db
from schemas.api import TypeCount, TypeListResponse, VendorCount, VendorListResponse
from models.location import Location
from models.vendor import Vendor

router = APIRouter(prefix="/api", tags=["Vendors"])


@router.get("/vendors", response_model=VendorListResponse)
async def get_vendors(db: AsyncSession = Depends(get_db)):
    """Active vendors with their active location counts, by name"""
    result = await db.execute(
        select(Vendor.id, Vendor.code, Vendor.name, func.count(Location.id))
        .outerjoin(Location, and_(Location.vendor_id == Vendor.id, Location.active.is_(True)))
        .where(Vendor.active.is_(True))
        .group_by(Vendor.id, Vendor.code, Vendor.name)
        .order_by(Vendor.name)
    )

    return VendorListResponse(vendors=[
        VendorCount(id=vendor_id, code=code, name=name, count=count)
        for vendor_id, code, name, count in result.all()
    ])


@router.get("/types", response_model=TypeListResponse)
async def get_types(db: AsyncSession = Depends(get_db)):
    """Active location counts per type, largest first"""
    count = func.count(Location.id)
    result = await db.execute(
        select(Location.type, count)
        .where(Location.active.is_(True))
        .group_by(Location.type)
        .order_by(count.desc())
    )

    return TypeListResponse(types=[
        TypeCount(type=location_type, count=n)
        for location_type, n in result.all()
    ])
