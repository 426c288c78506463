"""
Health check endpoint with database and sync status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, SyncRunInfo
from models.base import SyncStatus
from models.sync_run import SyncRun
from models.vendor import Vendor
from core.clock import utcnow
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Latest sync run of every vendor
    """

    # Check database connectivity
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    last_syncs = []
    failed_vendors = 0

    if db_connected:
        try:
            latest = (
                select(SyncRun.vendor_id, func.max(SyncRun.id).label("run_id"))
                .group_by(SyncRun.vendor_id)
                .subquery()
            )
            result = await db.execute(
                select(SyncRun, Vendor.code)
                .join(latest, SyncRun.id == latest.c.run_id)
                .join(Vendor, SyncRun.vendor_id == Vendor.id)
                .order_by(Vendor.code)
            )

            for run, vendor_code in result.all():
                if run.status == SyncStatus.FAILED:
                    failed_vendors += 1
                last_syncs.append(SyncRunInfo(
                    vendor=vendor_code,
                    status=run.status,
                    started_at=run.started_at,
                    ended_at=run.ended_at,
                    created=run.created,
                    updated=run.updated,
                    inactivated=run.inactivated,
                    error=run.error
                ))
        except Exception as e:
            logger.error(f"Failed to fetch sync runs: {str(e)}")

    return HealthCheckResponse(
        timestamp=utcnow(),
        database_connected=db_connected,
        last_syncs=last_syncs,
        total_vendors=len(last_syncs),
        failed_vendors=failed_vendors
    )
