"""
Database engine and session factory construction with SQLAlchemy async.

Nothing connects at import time: the batch job, the API and the tests each
build their own engine and pass sessions down explicitly.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the configured (or given) database URL"""
    url = database_url or settings.DATABASE_URL
    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,  # short-lived batch process, no pooling needed
        future=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to an engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
