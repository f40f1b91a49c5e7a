"""Box synchronization module.

This module handles:
- Streaming a box from the bucket to a temporary file
- Atomically replacing the local box and recording its fingerprint
- Skipping boxes whose recorded fingerprint is still current
"""

from bento_sync.sync.fetch import TransferResult, download_file
from bento_sync.sync.target import ReplaceError, SyncTarget

__all__ = [
    "ReplaceError",
    "SyncTarget",
    "TransferResult",
    "download_file",
]
