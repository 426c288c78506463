import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from core.config import settings
from core.database import create_engine, create_session_factory
from ingestion.runner import run_sync_batch

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs the daily vendor sync inside a long-lived process"""

    def __init__(self, session_factory=None, hour: Optional[int] = None, minute: Optional[int] = None):
        self.scheduler = AsyncIOScheduler()
        self.engine = None
        if session_factory is None:
            self.engine = create_engine()
            session_factory = create_session_factory(self.engine)
        self.session_factory = session_factory
        self.hour = settings.SYNC_CRON_HOUR if hour is None else hour
        self.minute = settings.SYNC_CRON_MINUTE if minute is None else minute

    async def run_sync_job(self):
        """Job to run the vendor sync batch"""
        logger.info("Scheduler: Starting vendor sync job")
        try:
            await run_sync_batch(self.session_factory)
        except Exception as e:
            logger.error(f"Scheduler: vendor sync job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_sync_job,
            trigger=CronTrigger(hour=self.hour, minute=self.minute),
            id="vendor_sync",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Sync Scheduler started (daily at {self.hour:02d}:{self.minute:02d})")

    async def stop(self):
        self.scheduler.shutdown()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("Sync Scheduler stopped")
