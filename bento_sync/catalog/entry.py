"""Catalog entries parsed from bucket keys.

Box files follow a fixed naming scheme:

    opscode_<os>-<version>[-<arch>]_chef-provisionerless.box

where <os> is a lowercase name, <version> a dotted numeric version and
<arch> either missing, 'i386' or 'x86_64'. Boxes without an arch or with
'i386' are 32-bit; 'x86_64' boxes are 64-bit.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field

from bento_sync.catalog.versions import Version
from bento_sync.types import Bitness

ARTIFACT_NAME_PATTERN = re.compile(
    r"^opscode_(?P<os>[a-z]+)-(?P<version>[0-9]+(?:\.[0-9]+)*)"
    r"(?:-(?P<arch>i386|x86_64))?_chef-provisionerless\.box$"
)

# Key segments that would escape or alias the download directory
UNSAFE_SEGMENTS = frozenset({"", ".", ".."})


class UnrecognizedArtifactName(Exception):
    """Raised when a bucket key does not follow the box naming scheme."""

    def __init__(
        self,
        remote_path: str,
        reason: str,
        code: str = "unrecognized_artifact",
    ) -> None:
        """Initialize UnrecognizedArtifactName.

        Args:
            remote_path: The offending bucket key.
            reason: Why the name was rejected.
            code: Error code for structured error handling.
        """
        super().__init__(f"Unable to match {remote_path}: {reason}")
        self.remote_path = remote_path
        self.reason = reason
        self.code = code


@dataclass(frozen=True)
class ArtifactName:
    """Fields recovered from a recognized box filename."""

    os: str
    version: Version
    bitness: Bitness


@dataclass(frozen=True)
class NameMismatch:
    """A filename that does not follow the box naming scheme."""

    filename: str
    reason: str = "does not match opscode_<os>-<version>[-<arch>]_chef-provisionerless.box"


def parse_artifact_name(filename: str) -> ArtifactName | NameMismatch:
    """Parse a box filename.

    Args:
        filename: Basename of the bucket key.

    Returns:
        ArtifactName on success, NameMismatch otherwise.
    """
    match = ARTIFACT_NAME_PATTERN.fullmatch(filename)
    if match is None:
        return NameMismatch(filename)

    bitness: Bitness = 64 if match.group("arch") == "x86_64" else 32
    return ArtifactName(
        os=match.group("os"),
        version=Version.parse(match.group("version")),
        bitness=bitness,
    )


@dataclass(frozen=True)
class CatalogEntry:
    """One box published in the bucket.

    Two entries are equal when both key and fingerprint match; the derived
    fields never take part in equality.

    Attributes:
        remote_path: Full bucket key of the box.
        fingerprint: Opaque content identity (the S3 ETag).
        os: Operating system name, e.g. 'centos'.
        version: Parsed box version.
        bitness: 32 or 64.
    """

    remote_path: str
    fingerprint: str
    os: str = field(init=False, compare=False)
    version: Version = field(init=False, compare=False)
    bitness: Bitness = field(init=False, compare=False)

    def __post_init__(self) -> None:
        """Derive os, version and bitness from the key.

        Raises:
            UnrecognizedArtifactName: If the key does not name a box or
                holds a relative segment.
        """
        if any(part in UNSAFE_SEGMENTS for part in self.remote_path.split(posixpath.sep)):
            raise UnrecognizedArtifactName(
                self.remote_path, "key contains an empty, '.' or '..' segment"
            )
        parsed = parse_artifact_name(self.filename)
        if isinstance(parsed, NameMismatch):
            raise UnrecognizedArtifactName(self.remote_path, parsed.reason)
        object.__setattr__(self, "os", parsed.os)
        object.__setattr__(self, "version", parsed.version)
        object.__setattr__(self, "bitness", parsed.bitness)

    @property
    def filename(self) -> str:
        """Basename of the bucket key."""
        return posixpath.basename(self.remote_path)

    @property
    def label(self) -> str:
        """Short human-readable description."""
        return f"{self.os}-{self.version} {self.bitness}bit"

    def url(self, base_url: str) -> str:
        """Download URL of the box under the given bucket URL."""
        return f"{base_url.rstrip('/')}/{self.remote_path}"

    def __str__(self) -> str:
        return self.label


def entry_sort_key(entry: CatalogEntry) -> tuple[str, tuple[int, ...], int]:
    """Sort key ordering entries by os, then version, then bitness."""
    return (entry.os, entry.version.sort_key, entry.bitness)


__all__ = [
    "ARTIFACT_NAME_PATTERN",
    "ArtifactName",
    "CatalogEntry",
    "NameMismatch",
    "UNSAFE_SEGMENTS",
    "UnrecognizedArtifactName",
    "entry_sort_key",
    "parse_artifact_name",
]
