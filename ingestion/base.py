"""
Abstract base class for vendor adapters
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from ingestion.http_client import FeedHTTPClient
from schemas.location import NormalizedLocation
import logging

logger = logging.getLogger(__name__)


class VendorAdapter(ABC):
    """
    Abstract base class for all vendor adapters.

    An adapter is a pure transformation plus a single I/O call:
    - fetch: one network request returning raw bytes (no retries)
    - parse: raw bytes to normalized records, no I/O

    Adapters hold only a logger and an HTTP client; vendor quirks live in
    module-level accessor tuples and lookup tables.
    """

    vendor_label: str = "vendor"
    default_country: str = "HU"

    def __init__(
        self,
        http_client: Optional[FeedHTTPClient] = None,
        log: Optional[logging.Logger] = None
    ):
        self.http = http_client or FeedHTTPClient()
        self.logger = log or logging.getLogger(type(self).__module__)

    async def fetch(self, url: str) -> bytes:
        """
        Fetch raw feed bytes.

        Raises:
            FetchError: On transport failure
        """
        return await self.http.get(url, label=self.vendor_label)

    @abstractmethod
    def parse(self, raw: bytes) -> List[NormalizedLocation]:
        """
        Parse raw vendor data into normalized locations.

        Bad individual records are skipped and logged.

        Raises:
            ParseError: If the payload is structurally malformed
        """
        pass

    def skip(self, reason: str, **details: Any) -> None:
        """Log a skipped record"""
        detail_str = ", ".join(f"{k}={v!r}" for k, v in details.items())
        self.logger.warning(f"Skipping {self.vendor_label} item: {reason} ({detail_str})")

    def build_record(self, **fields: Any) -> Optional[NormalizedLocation]:
        """
        Validate fields into a NormalizedLocation.

        Returns None (and logs) when validation fails.
        """
        fields.setdefault("country", self.default_country)
        try:
            return NormalizedLocation(**fields)
        except ValidationError as e:
            errors: Dict[str, str] = {
                ".".join(str(p) for p in err["loc"]): err["msg"] for err in e.errors()
            }
            self.skip(
                "failed validation",
                id=fields.get("vendor_location_id"),
                errors=errors
            )
            return None
