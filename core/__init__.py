"""
Core utilities and configuration for the parcel locker aggregator.

This package provides foundational components used throughout the sync pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Engine and session factory construction
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration (stdout plus optional run log file)
    clock: Naive-UTC time helper

Usage:
    from core.config import settings
    from core.database import create_engine, create_session_factory
    from core.exceptions import FetchError, ParseError
    from core.logging import setup_logging

Example:
    setup_logging()

    engine = create_engine()
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        ...
"""

__all__ = [
    "settings",
    "create_engine",
    "create_session_factory",
    "setup_logging",
    "utcnow",
    # Exceptions
    "SyncException",
    "RetryableError",
    "NonRetryableError",
    "FetchError",
    "ExhaustedRetriesError",
    "ParseError",
    "PersistenceError",
    "ConfigurationError",
]
