"""Meal plan catalog collaborator (read-only)."""
