"""Shared type definitions for bento_sync.

This module contains dataclasses, enums, and type aliases shared across
subpackages to avoid circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from bento_sync.catalog.entry import CatalogEntry

Bitness = Literal[32, 64]

BITNESSES: tuple[Bitness, ...] = (32, 64)


class SyncStatus(str, Enum):
    """Outcome of synchronizing one box."""

    FRESH = "fresh"
    DOWNLOADED = "downloaded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SyncResult:
    """Result of a sync operation for a single box."""

    entry: CatalogEntry
    status: SyncStatus
    message: str
    code: str | None = None
    status_code: int | None = None

    @property
    def success(self) -> bool:
        """Whether the box is (or was left) in a usable state."""
        return self.status != SyncStatus.FAILED


__all__ = [
    "BITNESSES",
    "Bitness",
    "SyncResult",
    "SyncStatus",
]
