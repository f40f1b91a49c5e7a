"""Bucket listing and box selection.

This module handles:
- Fetching the bucket listing (a single S3 ListBucketResult document)
- Extracting (key, ETag) pairs for VirtualBox boxes
- Building catalog entries and picking the newest match per group
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

import httpx

from bento_sync.catalog.entry import (
    CatalogEntry,
    UnrecognizedArtifactName,
    entry_sort_key,
)
from bento_sync.catalog.versions import DEFAULT_REQUIREMENT, VersionRequirement
from bento_sync.config import DEFAULT_KEY_PREFIX
from bento_sync.types import Bitness

logger = logging.getLogger(__name__)

# Timeout for the listing request (seconds)
LISTING_TIMEOUT = 60

BOX_SUFFIX = ".box"


class ListingError(Exception):
    """Raised when the bucket listing cannot be fetched or parsed."""

    def __init__(self, message: str, code: str = "listing_error") -> None:
        """Initialize ListingError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


def _local_name(tag: str) -> str:
    """Strip an XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child.text
    return None


def parse_listing(
    body: str | bytes,
    key_prefix: str = DEFAULT_KEY_PREFIX,
) -> list[tuple[str, str]]:
    """Extract box keys and ETags from a ListBucketResult document.

    Records without a Key or ETag, and keys outside the prefix or not
    ending in '.box', are skipped.

    Args:
        body: Raw XML body.
        key_prefix: Keep only keys starting with this prefix.

    Returns:
        List of (key, fingerprint) tuples in document order.

    Raises:
        ListingError: If the body is not well-formed XML.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ListingError(
            f"Failed to parse bucket listing: {e}",
            code="parse_error",
        ) from e

    records: list[tuple[str, str]] = []
    for element in root.iter():
        if _local_name(element.tag) != "Contents":
            continue

        key = _child_text(element, "Key")
        etag = _child_text(element, "ETag")
        if not key or etag is None:
            logger.debug("Skipping incomplete listing record: %r", key)
            continue
        if not key.startswith(key_prefix) or not key.endswith(BOX_SUFFIX):
            continue

        records.append((key, etag))

    return records


def fetch_listing(
    client: httpx.Client,
    bucket_url: str,
    key_prefix: str = DEFAULT_KEY_PREFIX,
    timeout: float = LISTING_TIMEOUT,
) -> list[tuple[str, str]]:
    """Fetch and parse the bucket listing.

    Args:
        client: HTTPX client instance.
        bucket_url: Bucket base URL.
        key_prefix: Keep only keys starting with this prefix.
        timeout: Request timeout in seconds.

    Returns:
        List of (key, fingerprint) tuples.

    Raises:
        ListingError: If the request fails or the body cannot be parsed.
    """
    logger.debug("Fetching bucket listing from %s", bucket_url)

    try:
        response = client.get(bucket_url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ListingError(
            f"HTTP error fetching listing: {e.response.status_code} {e.response.reason_phrase}",
            code="http_error",
        ) from e
    except httpx.TimeoutException as e:
        raise ListingError(
            f"Timeout fetching listing from {bucket_url}",
            code="timeout",
        ) from e
    except httpx.RequestError as e:
        raise ListingError(
            f"Network error fetching listing: {e}",
            code="network_error",
        ) from e

    records = parse_listing(response.content, key_prefix)
    logger.info("Bucket listing has %d box(es) under %s", len(records), key_prefix)
    return records


def build_entries(records: list[tuple[str, str]]) -> list[CatalogEntry]:
    """Turn listing records into catalog entries, dropping unknown names."""
    entries: list[CatalogEntry] = []
    for key, fingerprint in records:
        try:
            entries.append(CatalogEntry(key, fingerprint))
        except UnrecognizedArtifactName as e:
            logger.debug("Skipping %s", e)
    return entries


def select_latest(
    entries: list[CatalogEntry],
    os: str,
    requirement: str = DEFAULT_REQUIREMENT,
    bitness: Bitness = 32,
) -> CatalogEntry | None:
    """Pick the newest entry for an os and bitness satisfying a requirement.

    Entries that tie on (os, version, bitness) resolve to the one listed last.

    Raises:
        MalformedConstraint: If the requirement cannot be parsed.
    """
    parsed = VersionRequirement.parse(requirement)
    candidates = [
        entry
        for entry in entries
        if entry.os == os
        and entry.bitness == bitness
        and parsed.satisfied_by(entry.version)
    ]
    if not candidates:
        return None
    # sorted() is stable, so the last of equal keys is the last one listed
    return sorted(candidates, key=entry_sort_key)[-1]


class Catalog:
    """Boxes available in the bucket.

    The listing is fetched on first use and reused afterwards.
    """

    def __init__(
        self,
        client: httpx.Client,
        bucket_url: str,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        timeout: float = LISTING_TIMEOUT,
    ) -> None:
        self.client = client
        self.bucket_url = bucket_url
        self.key_prefix = key_prefix
        self.timeout = timeout
        self._entries: list[CatalogEntry] | None = None

    def fetch_listing(self) -> list[tuple[str, str]]:
        """Fetch the raw (key, fingerprint) records from the bucket."""
        return fetch_listing(self.client, self.bucket_url, self.key_prefix, self.timeout)

    def entries(self) -> list[CatalogEntry]:
        """Return all recognized boxes, fetching the listing once."""
        if self._entries is None:
            self._entries = build_entries(self.fetch_listing())
        return self._entries

    def latest(
        self,
        os: str,
        requirement: str = DEFAULT_REQUIREMENT,
        bitness: Bitness = 32,
    ) -> CatalogEntry | None:
        """Return the newest matching box, or None if nothing qualifies."""
        return select_latest(self.entries(), os, requirement, bitness)


__all__ = [
    "BOX_SUFFIX",
    "Catalog",
    "LISTING_TIMEOUT",
    "ListingError",
    "build_entries",
    "fetch_listing",
    "parse_listing",
    "select_latest",
]
