import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy import select
from core.database import create_engine, create_session_factory
from core.logging import setup_logging
from models import Base, Vendor, VendorFeed

logger = logging.getLogger(__name__)

GLS_FEED = "https://map.gls-hungary.com/data/deliveryPoints/{}.json"

# code -> (name, active, [(feed_key, url), ...])
DEFAULT_VENDORS = {
    "foxpost": ("Foxpost", True, [("", "https://cdn.foxpost.hu/foxplus.json")]),
    "gls": ("GLS Hungary", True, [("", GLS_FEED.format("hu"))]),
    "gls_cz": ("GLS Czech Republic", True, [("", GLS_FEED.format("cz"))]),
    "gls_sk": ("GLS Slovakia", True, [("", GLS_FEED.format("sk"))]),
    "gls_ro": ("GLS Romania", True, [("", GLS_FEED.format("ro"))]),
    "mpl": ("MPL (Magyar Posta)", True, [("", "http://httpmegosztas.posta.hu/PartnerExtra/Out/PostInfo_CS.xml")]),
    # Locker list needs partner credentials; enable once a feed row is added
    "sameday": ("Sameday easybox", False, []),
}


async def seed_vendors(session) -> int:
    """Insert missing default vendors and their feeds. Returns vendors added."""
    added = 0
    for code, (name, active, feeds) in DEFAULT_VENDORS.items():
        existing = await session.execute(select(Vendor.id).where(Vendor.code == code))
        if existing.first() is not None:
            logger.info(f"Vendor {code} already present")
            continue

        vendor = Vendor(code=code, name=name, active=active)
        vendor.feeds = [
            VendorFeed(url=url, feed_key=feed_key, position=position)
            for position, (feed_key, url) in enumerate(feeds)
        ]
        session.add(vendor)
        added += 1
        logger.info(f"Seeded vendor {code} with {len(feeds)} feeds")

    await session.commit()
    return added


async def init_database(database_url=None):
    logger.info("Connecting to database...")
    engine = create_engine(database_url)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables...")
            # Create all tables defined in models
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")

        async with create_session_factory(engine)() as session:
            added = await seed_vendors(session)
            logger.info(f"Seeded {added} vendors")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
