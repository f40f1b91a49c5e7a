"""Box transfer.

Streams a box from the bucket to a local file. Failures are reported in
the returned TransferResult rather than raised, so callers can clean up
and move on to the next box.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

# Timeout for downloads (seconds)
DOWNLOAD_TIMEOUT = 3600

# Chunk size for downloads (bytes)
DOWNLOAD_CHUNK_SIZE = 64 * 1024  # 64 KB


@dataclass
class TransferResult:
    """Result of a box transfer.

    Attributes:
        success: Whether the whole body was written to disk.
        size_bytes: Bytes written.
        status_code: HTTP status, when a response was received.
        error: Error code on failure ('http_error', 'timeout', 'network_error').
        message: Human-readable failure description.
    """

    success: bool
    size_bytes: int = 0
    status_code: int | None = None
    error: str | None = None
    message: str | None = None


def download_file(
    client: httpx.Client,
    url: str,
    dest_path: Path,
    timeout: float = DOWNLOAD_TIMEOUT,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
) -> TransferResult:
    """Download a URL to a file.

    The destination may be left partially written on failure; the caller
    owns its cleanup.

    Args:
        client: HTTPX client instance.
        url: URL to download from.
        dest_path: Destination path for the downloaded file.
        timeout: Download timeout in seconds.
        chunk_size: Size of chunks to download.

    Returns:
        TransferResult describing the outcome.
    """
    logger.info("Downloading %s to %s", url, dest_path)

    total_bytes = 0
    try:
        with client.stream("GET", url, timeout=timeout) as response:
            response.raise_for_status()

            with dest_path.open("wb") as f:
                for chunk in response.iter_bytes(chunk_size):
                    f.write(chunk)
                    total_bytes += len(chunk)

    except httpx.HTTPStatusError as e:
        return TransferResult(
            success=False,
            size_bytes=total_bytes,
            status_code=e.response.status_code,
            error="http_error",
            message=f"HTTP error downloading {url}: {e.response.status_code} {e.response.reason_phrase}",
        )
    except httpx.TimeoutException:
        return TransferResult(
            success=False,
            size_bytes=total_bytes,
            error="timeout",
            message=f"Timeout downloading {url}",
        )
    except httpx.RequestError as e:
        return TransferResult(
            success=False,
            size_bytes=total_bytes,
            error="network_error",
            message=f"Network error downloading {url}: {e}",
        )

    logger.info("Downloaded %s (%d bytes)", dest_path.name, total_bytes)
    return TransferResult(
        success=True,
        size_bytes=total_bytes,
        status_code=response.status_code,
    )


__all__ = [
    "DOWNLOAD_CHUNK_SIZE",
    "DOWNLOAD_TIMEOUT",
    "TransferResult",
    "download_file",
]
