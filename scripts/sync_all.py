"""
Daily sync of every active vendor.

Usage: python scripts/sync_all.py
Cron:  0 5 * * * cd /path/to/project && python scripts/sync_all.py

Exits 0 even when single vendors fail (see the run log); exits 1 only when
the job itself fails, e.g. the vendor list cannot be read.
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import create_engine, create_session_factory
from core.logging import setup_logging
from ingestion.runner import run_sync_batch

logger = logging.getLogger(__name__)


async def run_sync(database_url=None, adapters=None) -> int:
    """Run the batch and return the process exit code"""
    engine = create_engine(database_url)

    logger.info("=== Starting sync job ===")

    try:
        results = await run_sync_batch(create_session_factory(engine), adapters=adapters)
        failed = [code for code, result in results.items() if not result["success"]]
        logger.info(f"=== Sync job completed: {len(results) - len(failed)} ok, {len(failed)} failed ===")
        return 0

    except Exception as e:
        logger.exception(f"Sync job failed: {str(e)}")
        return 1

    finally:
        await engine.dispose()


def main():
    setup_logging()
    sys.exit(asyncio.run(run_sync()))


if __name__ == "__main__":
    main()
