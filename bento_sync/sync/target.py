"""Local synchronization of a single box.

Each SyncTarget owns three paths below the download directory, all
mirroring the bucket key:

- the box itself: <download_dir>/<key>
- the fingerprint sidecar: <download_dir>/<key>.fingerprint
- the temporary download: <download_dir>/<dir of key>/.tmp.<filename>

The temporary file sits next to the box so the final rename stays on one
filesystem and is atomic. The sidecar is only written after the rename,
and is removed when a transfer fails, so a box is never reported fresh
unless its last download completed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from functools import cached_property
from pathlib import Path

import httpx

from bento_sync.catalog.entry import CatalogEntry
from bento_sync.sync.fetch import DOWNLOAD_TIMEOUT, TransferResult, download_file
from bento_sync.types import SyncResult, SyncStatus

logger = logging.getLogger(__name__)

FINGERPRINT_SUFFIX = ".fingerprint"

TMP_PREFIX = ".tmp."

Transfer = Callable[..., TransferResult]


class ReplaceError(Exception):
    """Raised when a downloaded box cannot be moved into place."""

    def __init__(self, message: str, code: str = "replace_error") -> None:
        """Initialize ReplaceError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class SyncTarget:
    """Keeps one local box in line with its catalog entry."""

    def __init__(
        self,
        entry: CatalogEntry,
        client: httpx.Client,
        bucket_url: str,
        download_dir: Path,
        timeout: float = DOWNLOAD_TIMEOUT,
        transfer: Transfer = download_file,
    ) -> None:
        """Initialize SyncTarget.

        Args:
            entry: The selected catalog entry.
            client: HTTPX client used for the transfer.
            bucket_url: Bucket base URL the entry is downloaded from.
            download_dir: Local root mirroring the bucket layout.
            timeout: Download timeout in seconds.
            transfer: Function performing the download.
        """
        self.entry = entry
        self.client = client
        self.bucket_url = bucket_url
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self.transfer = transfer

    @property
    def path(self) -> Path:
        """Local path of the box."""
        return self.download_dir / self.entry.remote_path

    @property
    def fingerprint_path(self) -> Path:
        """Sidecar file holding the fingerprint of the local box."""
        return self.path.with_name(self.path.name + FINGERPRINT_SUFFIX)

    @property
    def tmp_path(self) -> Path:
        """Temporary download path, hidden and next to the box."""
        return self.path.with_name(TMP_PREFIX + self.path.name)

    @cached_property
    def _fresh(self) -> bool:
        return (
            self.path.exists()
            and self.fingerprint_path.exists()
            and self.fingerprint_path.read_bytes()
            == self.entry.fingerprint.encode("utf-8")
        )

    def is_fresh(self) -> bool:
        """Whether the local box matches the entry.

        Computed on first call and reused for the lifetime of the target.
        """
        return self._fresh

    def ensure_directory(self) -> None:
        """Create the parent directory of the box if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def save_fingerprint(self) -> None:
        """Record the entry's fingerprint in the sidecar file."""
        self.ensure_directory()
        self.fingerprint_path.write_bytes(self.entry.fingerprint.encode("utf-8"))

    def run(self) -> SyncResult:
        """Download the box unless it is already fresh.

        Returns:
            SyncResult with status FRESH, DOWNLOADED or FAILED.

        Raises:
            ReplaceError: If the downloaded file cannot be renamed into place.
        """
        if self.is_fresh():
            logger.debug("%s is up to date at %s", self.entry, self.path)
            return SyncResult(
                entry=self.entry,
                status=SyncStatus.FRESH,
                message=f"{self.entry} is up to date",
            )

        self.ensure_directory()

        try:
            result = self.transfer(
                self.client,
                self.entry.url(self.bucket_url),
                self.tmp_path,
                timeout=self.timeout,
            )
        except Exception:
            self.tmp_path.unlink(missing_ok=True)
            raise

        if not result.success:
            self.tmp_path.unlink(missing_ok=True)
            self.fingerprint_path.unlink(missing_ok=True)
            logger.warning("Failed to download %s: %s", self.entry, result.message)
            return SyncResult(
                entry=self.entry,
                status=SyncStatus.FAILED,
                message=f"Failed to download {self.entry}: {result.message}",
                code=result.error,
                status_code=result.status_code,
            )

        try:
            os.replace(self.tmp_path, self.path)
        except OSError as e:
            self.tmp_path.unlink(missing_ok=True)
            raise ReplaceError(
                f"Failed to move {self.tmp_path} to {self.path}: {e}"
            ) from e

        self.save_fingerprint()
        logger.info("Synchronized %s to %s", self.entry, self.path)
        return SyncResult(
            entry=self.entry,
            status=SyncStatus.DOWNLOADED,
            message=f"Downloaded {self.entry} ({result.size_bytes} bytes)",
        )


__all__ = [
    "FINGERPRINT_SUFFIX",
    "ReplaceError",
    "SyncTarget",
    "TMP_PREFIX",
    "Transfer",
]
