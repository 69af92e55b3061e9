"""
Media Layer.

This package is responsible for fetching content archives from remote storage
and unpacking them into the staging directory.
"""

from .archive_fetcher import ArchiveFetcher

__all__ = ["ArchiveFetcher"]
