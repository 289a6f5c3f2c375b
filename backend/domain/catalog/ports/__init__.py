"""Catalog ports."""

from .catalog_reader import ICatalogReader

__all__ = ["ICatalogReader"]
