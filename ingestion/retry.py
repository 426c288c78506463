"""
Bounded retry with a fixed delay around an adapter's fetch.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from core.exceptions import ExhaustedRetriesError, FetchError
from ingestion.base import VendorAdapter
import logging

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


async def fetch_with_retry(
    adapter: VendorAdapter,
    url: str,
    max_attempts: int,
    delay: float,
    sleep: Sleep = asyncio.sleep
) -> bytes:
    """
    Call adapter.fetch up to max_attempts times.

    Only FetchError is retried; anything else propagates at once. The delay
    is fixed, not exponential.

    Raises:
        ExhaustedRetriesError: After the last failed attempt, wrapping the
            final FetchError
    """
    attempts = max(1, max_attempts)
    last_error: Optional[FetchError] = None

    for attempt in range(1, attempts + 1):
        try:
            logger.debug(f"Fetch attempt {attempt}/{attempts} to {url}")
            return await adapter.fetch(url)

        except FetchError as e:
            last_error = e
            if attempt < attempts:
                logger.warning(
                    f"Fetch attempt {attempt} failed for {adapter.vendor_label}, "
                    f"retrying in {delay} seconds: {e.message}"
                )
                await sleep(delay)

    raise ExhaustedRetriesError(
        f"Failed to fetch after {attempts} attempts: {last_error.message}",
        attempts=attempts,
        last_error=last_error,
        context={"url": url, "vendor": adapter.vendor_label}
    )
