"""
Vendor sync pipeline components.

This package contains everything the daily sync needs:

Modules:
    base: Abstract base class for vendor adapters
    http_client: Single-request HTTP fetch used by adapters
    retry: Bounded fixed-delay retry around an adapter fetch
    vendors: Vendor and feed lookups
    runner: Sync orchestrator with per-vendor fault isolation
    scheduler: APScheduler integration for the daily sync

Subpackages:
    adapters: One adapter per vendor family (Foxpost, GLS, MPL, Sameday)
    transformers: Field alias and normalization helpers
    loaders: Location reconciler and payload snapshot store

Architecture:
    Every vendor sync runs as:

    1. Fetch - one GET per feed, retried on transport failure
    2. Snapshot - raw bytes stored for audit and replay
    3. Parse - raw bytes to normalized records, bad records skipped
    4. Reconcile - upsert by (vendor, vendor_location_id), then retire
       locations not seen within the inactivity threshold

Usage:
    from ingestion.adapters import default_adapters
    from ingestion.runner import SyncOrchestrator

Example:
    orchestrator = SyncOrchestrator(session, adapters=default_adapters())
    results = await orchestrator.sync_all()

    print(results["foxpost"]["created"])

Error Handling:
    All components raise the exceptions in core.exceptions. A vendor failure
    is recorded on its SyncRun and in the sync_all result; it never stops the
    other vendors.
"""

__all__ = [
    "VendorAdapter",
    "FeedHTTPClient",
    "fetch_with_retry",
    "VendorDirectory",
    "FeedSpec",
    "SyncOrchestrator",
    "run_sync_batch",
    "SyncScheduler",
]
