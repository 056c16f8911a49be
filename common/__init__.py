"""
Common utilities for the docbench load harness.
"""

from .latency_stats import LatencyStats
from .metrics_utils import format_duration

__all__ = ['LatencyStats', 'format_duration']
