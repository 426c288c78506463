"""
Single-request HTTP fetch used by vendor adapters.

One GET per call: redirects followed, TLS verified, connect and total
timeouts applied. No retries here; the retry fetcher owns that.
"""

import httpx
from typing import Optional
from core.config import settings
from core.exceptions import FetchError
import logging

logger = logging.getLogger(__name__)


class FeedHTTPClient:
    """
    Fetch raw feed bytes over HTTP.

    Attributes:
        timeout: Total request budget in seconds (default: HTTP_TIMEOUT)
        connect_timeout: Connection budget in seconds (default: HTTP_CONNECT_TIMEOUT)
        user_agent: User-Agent header sent to vendors
        client: Optional externally owned httpx.AsyncClient (used as-is)
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.connect_timeout = connect_timeout if connect_timeout is not None else settings.HTTP_CONNECT_TIMEOUT
        self.user_agent = user_agent or settings.HTTP_USER_AGENT
        self._client = client

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout, connect=self.connect_timeout)

    async def get(self, url: str, label: str = "vendor") -> bytes:
        """
        Perform one GET request.

        Returns:
            Raw response body

        Raises:
            FetchError: On non-2xx status, transport error or timeout
        """
        headers = {"User-Agent": self.user_agent, "Accept": "*/*"}

        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self._timeout(), follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout(), follow_redirects=True, verify=True
                ) as client:
                    response = await client.get(url, headers=headers)

        except httpx.TimeoutException as e:
            raise FetchError(
                f"{label} fetch timed out",
                context={"url": url, "vendor": label, "timeout": self.timeout},
                original_exception=e
            )

        except httpx.HTTPError as e:
            raise FetchError(
                f"{label} fetch failed: {e}",
                context={"url": url, "vendor": label},
                original_exception=e
            )

        if not response.is_success:
            raise FetchError(
                f"{label} API returned HTTP {response.status_code}",
                context={"url": url, "vendor": label},
                status_code=response.status_code
            )

        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return response.content
