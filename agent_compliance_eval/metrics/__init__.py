"""Supplementary linguistic metrics for agent responses."""

from .engine import compute_metrics, is_low_quality
from .schema import MetricsBundle

__all__ = ["compute_metrics", "is_low_quality", "MetricsBundle"]
