"""Bento Sync - keep a local mirror of the latest Bento Vagrant boxes.

This package lists the public Bento bucket, picks the newest box per
operating system and bitness that satisfies a version requirement, and
downloads anything that changed since the last run.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
