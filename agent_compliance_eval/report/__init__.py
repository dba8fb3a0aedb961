"""Aggregate reporting over evaluation records."""

from .analytics import compute_analytics

__all__ = ["compute_analytics"]
