"""Catalog reader factory.

CATALOG_BACKEND selects the adapter:
- "inmemory" (default): empty in-memory catalog, seeded by tests or fixtures
- "http": HttpCatalogReader against CATALOG_BASE_URL
"""

from typing import Optional

from domain.catalog.ports import ICatalogReader
from infrastructure.config import (
    get_catalog_backend,
    get_catalog_base_url,
    get_catalog_timeout,
)

from .in_memory_catalog import InMemoryCatalogReader


def create_catalog_reader() -> ICatalogReader:
    """Create catalog reader based on CATALOG_BACKEND.

    Raises:
        ValueError: If http is selected but CATALOG_BASE_URL is not set
    """
    if get_catalog_backend() == "http":
        base_url = get_catalog_base_url()
        if not base_url:
            raise ValueError("CATALOG_BACKEND=http but CATALOG_BASE_URL not set")
        from .http_catalog import HttpCatalogReader

        return HttpCatalogReader(base_url=base_url, timeout_s=get_catalog_timeout())
    return InMemoryCatalogReader()


_catalog_reader: Optional[ICatalogReader] = None


def get_catalog_reader() -> ICatalogReader:
    """Get singleton catalog reader instance."""
    global _catalog_reader
    if _catalog_reader is None:
        _catalog_reader = create_catalog_reader()
    return _catalog_reader


def reset_catalog_reader() -> None:
    global _catalog_reader
    _catalog_reader = None
