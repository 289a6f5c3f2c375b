"""Subscription and delegation persistence."""
