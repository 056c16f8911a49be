"""
Thread-safe latency sketch backed by an HDR histogram.
"""

import threading
import logging

from hdrh.histogram import HdrHistogram

from configuration import (
    NANOSECONDS_PER_SECOND,
    HISTOGRAM_LOWEST_NS,
    HISTOGRAM_HIGHEST_NS,
    HISTOGRAM_SIGNIFICANT_FIGURES,
)

logger = logging.getLogger(__name__)


class LatencyStats:
    """Online mean/percentile estimator for operation latencies.

    Samples are given in seconds and stored as nanoseconds in a fixed-size
    HDR histogram, so memory does not grow with the number of samples.
    Values above the histogram range are clamped to its upper bound.
    """

    def __init__(self, highest_ns: int = HISTOGRAM_HIGHEST_NS):
        self._histogram = HdrHistogram(
            HISTOGRAM_LOWEST_NS, highest_ns, HISTOGRAM_SIGNIFICANT_FIGURES
        )
        self._highest_ns = highest_ns
        self._clamped = 0
        self._lock = threading.Lock()

    def add_sample(self, seconds: float) -> None:
        """Record one latency sample.

        Args:
            seconds: Elapsed wall-clock time of the operation
        """
        value = int(seconds * NANOSECONDS_PER_SECOND)
        clamped = value > self._highest_ns
        if value < HISTOGRAM_LOWEST_NS:
            value = HISTOGRAM_LOWEST_NS
        elif clamped:
            value = self._highest_ns
        with self._lock:
            if clamped:
                self._clamped += 1
            first_clamp = clamped and self._clamped == 1
            self._histogram.record_value(value)
        if first_clamp:
            logger.warning(f"Latency sample of {seconds:.1f}s exceeds histogram range, clamping")

    def count(self) -> int:
        with self._lock:
            return self._histogram.get_total_count()

    def mean(self) -> float:
        """Mean latency in seconds (0.0 when empty)."""
        with self._lock:
            if self._histogram.get_total_count() == 0:
                return 0.0
            return self._histogram.get_mean_value() / NANOSECONDS_PER_SECOND

    def percentile(self, p: float) -> float:
        """Latency in seconds at quantile p.

        Args:
            p: Quantile in the closed range [0, 1]

        Returns:
            Latency in seconds (0.0 when empty)

        Raises:
            ValueError: If p is outside [0, 1]
        """
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"Percentile must be within [0, 1], got {p}")
        with self._lock:
            if self._histogram.get_total_count() == 0:
                return 0.0
            return self._histogram.get_value_at_percentile(p * 100.0) / NANOSECONDS_PER_SECOND

    def __repr__(self) -> str:
        return f"LatencyStats(count={self.count()}, mean={self.mean():.6f}s)"
