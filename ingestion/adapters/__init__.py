"""
Vendor adapters, one per vendor family.

Usage:
    from ingestion.adapters import default_adapters

    adapters = default_adapters()
    raw = await adapters["foxpost"].fetch(url)
    records = adapters["foxpost"].parse(raw)
"""

from typing import Dict, Optional
from ingestion.base import VendorAdapter
from ingestion.http_client import FeedHTTPClient
from ingestion.adapters.foxpost import FoxpostAdapter
from ingestion.adapters.gls import GlsAdapter
from ingestion.adapters.mpl import MplAdapter
from ingestion.adapters.sameday import SamedayAdapter

# vendor code -> adapter class; GLS serves several regional vendor codes
ADAPTER_CLASSES = {
    "foxpost": FoxpostAdapter,
    "gls": GlsAdapter,
    "gls_cz": GlsAdapter,
    "gls_sk": GlsAdapter,
    "gls_ro": GlsAdapter,
    "mpl": MplAdapter,
    "sameday": SamedayAdapter,
}


def default_adapters(http_client: Optional[FeedHTTPClient] = None) -> Dict[str, VendorAdapter]:
    """Build the adapter registry used by the batch job"""
    http_client = http_client or FeedHTTPClient()
    return {code: cls(http_client=http_client) for code, cls in ADAPTER_CLASSES.items()}


__all__ = [
    "ADAPTER_CLASSES",
    "default_adapters",
    "FoxpostAdapter",
    "GlsAdapter",
    "MplAdapter",
    "SamedayAdapter",
]
