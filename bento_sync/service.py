"""Sync service module.

This module provides the high-level APIs used by the CLI:
- select_entries(): pick the newest box for every registry item and bitness
- sync_entries(): bring each selected box up to date, one at a time
- run_sync(): the full listing, selection and sync pass

Everything runs sequentially on a single HTTPX client.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from bento_sync.catalog import Catalog, CatalogEntry, entry_sort_key
from bento_sync.config import get_settings
from bento_sync.registry import RegistryItem, load_registry
from bento_sync.sync import SyncTarget, download_file
from bento_sync.sync.target import Transfer
from bento_sync.types import BITNESSES, SyncResult, SyncStatus

if TYPE_CHECKING:
    from bento_sync.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Selection and per-box results of one run."""

    selected: list[CatalogEntry] = field(default_factory=list)
    results: list[SyncResult] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Number of results per status."""
        counter = Counter(r.status.value for r in self.results)
        return {status.value: counter.get(status.value, 0) for status in SyncStatus}

    @property
    def failed(self) -> list[SyncResult]:
        """Results of boxes that could not be downloaded."""
        return [r for r in self.results if not r.success]


def select_entries(
    catalog: Catalog,
    registry: list[RegistryItem],
) -> list[CatalogEntry]:
    """Select the newest box per registry item and bitness.

    Args:
        catalog: Catalog to select from.
        registry: Box groups to mirror.

    Returns:
        Selected entries sorted by os, version and bitness, without duplicates.

    Raises:
        MalformedConstraint: If a registry requirement cannot be parsed.
        ListingError: If the bucket listing cannot be fetched.
    """
    selected: list[CatalogEntry] = []
    for item in registry:
        for bitness in BITNESSES:
            entry = catalog.latest(item.os, item.requirement, bitness)
            if entry is None:
                logger.info(
                    "No %d-bit %s box satisfies %r", bitness, item.os, item.requirement
                )
                continue
            if entry not in selected:
                selected.append(entry)
    return sorted(selected, key=entry_sort_key)


def sync_entries(
    entries: list[CatalogEntry],
    client: httpx.Client,
    settings: Settings,
    dry_run: bool = False,
    transfer: Transfer = download_file,
    on_entry: Callable[[CatalogEntry], None] | None = None,
) -> list[SyncResult]:
    """Bring every selected box up to date.

    Transfer failures are recorded and the run continues with the next box.

    Args:
        entries: Selected entries in sync order.
        client: HTTPX client for downloads.
        settings: Application settings.
        dry_run: List only; do not touch local files.
        transfer: Function performing the download.
        on_entry: Called with each entry before it is synchronized.

    Returns:
        One SyncResult per entry.

    Raises:
        ReplaceError: If a downloaded box cannot be moved into place.
    """
    results: list[SyncResult] = []
    for entry in entries:
        if on_entry is not None:
            on_entry(entry)
        if dry_run:
            results.append(
                SyncResult(
                    entry=entry,
                    status=SyncStatus.SKIPPED,
                    message=f"Skipped {entry} (dry run)",
                )
            )
            continue

        target = SyncTarget(
            entry,
            client=client,
            bucket_url=settings.bucket_url,
            download_dir=settings.download_dir,
            timeout=settings.download_timeout,
            transfer=transfer,
        )
        results.append(target.run())
    return results


def run_sync(
    settings: Settings | None = None,
    registry: list[RegistryItem] | None = None,
    dry_run: bool = False,
    client: httpx.Client | None = None,
    transfer: Transfer = download_file,
    on_entry: Callable[[CatalogEntry], None] | None = None,
) -> SyncReport:
    """Run a full listing, selection and sync pass.

    Args:
        settings: Application settings (uses defaults if not provided).
        registry: Box groups to mirror (loaded from settings if not provided).
        dry_run: Select and report only.
        client: HTTPX client (creates one if not provided).
        transfer: Function performing the download.
        on_entry: Called with each entry before it is synchronized.

    Returns:
        SyncReport with the selection and per-box results.

    Raises:
        RegistryError: If the registry file is invalid.
        ListingError: If the bucket listing cannot be fetched.
        MalformedConstraint: If a requirement cannot be parsed.
        ReplaceError: If a downloaded box cannot be moved into place.
    """
    if settings is None:
        settings = get_settings()
    if registry is None:
        registry = load_registry(settings.registry_file)

    manage_client = client is None
    http_client: httpx.Client = (
        httpx.Client(follow_redirects=True) if client is None else client
    )

    try:
        catalog = Catalog(
            http_client,
            settings.bucket_url,
            key_prefix=settings.key_prefix,
            timeout=settings.listing_timeout,
        )
        report = SyncReport(selected=select_entries(catalog, registry))
        report.results = sync_entries(
            report.selected,
            http_client,
            settings,
            dry_run=dry_run,
            transfer=transfer,
            on_entry=on_entry,
        )
    finally:
        if manage_client:
            http_client.close()

    logger.info("Sync finished: %s", report.counts())
    return report


__all__ = [
    "SyncReport",
    "run_sync",
    "select_entries",
    "sync_entries",
]
