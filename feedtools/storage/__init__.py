"""
Storage Layer.

This package handles the configuration file, the in-memory lookup caches and
the discovery of the local Steam installation.
"""

from .cache import CatalogCache, SearchCache
from .config_manager import ConfigManager
from .locator import InstallationLocator

__all__ = ["CatalogCache", "ConfigManager", "InstallationLocator", "SearchCache"]
