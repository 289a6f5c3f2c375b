"""Catalog records as read by the subscription core."""

from .catalog_records import CatalogMeal, CatalogPlan, ScheduleEntry

__all__ = ["CatalogPlan", "ScheduleEntry", "CatalogMeal"]
