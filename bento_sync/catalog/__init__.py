"""Box catalog module.

This module handles:
- Parsing box filenames into typed catalog entries
- Version requirements, including the pessimistic '~>' operator
- Fetching the bucket listing and selecting the newest box per group
"""

from bento_sync.catalog.entry import (
    CatalogEntry,
    UnrecognizedArtifactName,
    entry_sort_key,
    parse_artifact_name,
)
from bento_sync.catalog.listing import (
    Catalog,
    ListingError,
    fetch_listing,
    parse_listing,
    select_latest,
)
from bento_sync.catalog.versions import (
    MalformedConstraint,
    Version,
    VersionRequirement,
)

__all__ = [
    # Entries
    "CatalogEntry",
    "UnrecognizedArtifactName",
    "entry_sort_key",
    "parse_artifact_name",
    # Versions
    "MalformedConstraint",
    "Version",
    "VersionRequirement",
    # Listing
    "Catalog",
    "ListingError",
    "fetch_listing",
    "parse_listing",
    "select_latest",
]
