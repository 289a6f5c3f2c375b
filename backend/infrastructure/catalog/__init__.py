"""Catalog adapters."""

from .factory import create_catalog_reader, get_catalog_reader, reset_catalog_reader
from .in_memory_catalog import InMemoryCatalogReader

__all__ = [
    "InMemoryCatalogReader",
    "create_catalog_reader",
    "get_catalog_reader",
    "reset_catalog_reader",
]
