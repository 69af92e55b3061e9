"""
Steam API Layer.

This package handles all communication with the public Steam endpoints: the
app list, the store search page and the appdetails API.
"""

from .catalog import CatalogClient
from .details import DetailsClient
from .store_search import StoreSearchClient

__all__ = ["CatalogClient", "DetailsClient", "StoreSearchClient"]
