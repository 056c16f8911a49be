"""Test suite for the HDR-backed latency sketch."""

import sys
import os
import logging
import threading

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.latency_stats import LatencyStats
from configuration import HISTOGRAM_HIGHEST_NS, NANOSECONDS_PER_SECOND


class TestLatencyStats:
    """Test cases for LatencyStats."""

    def test_empty_sketch(self):
        """Should report zeros when no sample was added."""
        stats = LatencyStats()
        assert stats.count() == 0
        assert stats.mean() == 0.0
        assert stats.percentile(0.95) == 0.0

    def test_single_sample(self):
        stats = LatencyStats()
        stats.add_sample(0.002)
        assert stats.count() == 1
        assert stats.mean() == pytest.approx(0.002, rel=0.01)
        assert stats.percentile(0.5) == pytest.approx(0.002, rel=0.01)

    def test_percentiles_of_uniform_samples(self):
        """Samples of 1..100 ms should give matching quantiles."""
        stats = LatencyStats()
        for ms in range(1, 101):
            stats.add_sample(ms / 1000.0)

        assert stats.count() == 100
        assert stats.mean() == pytest.approx(0.0505, rel=0.01)
        assert stats.percentile(0.8) == pytest.approx(0.080, rel=0.01)
        assert stats.percentile(0.9) == pytest.approx(0.090, rel=0.01)
        assert stats.percentile(0.95) == pytest.approx(0.095, rel=0.01)
        assert stats.percentile(1.0) == pytest.approx(0.100, rel=0.01)

    def test_percentiles_are_ordered(self):
        stats = LatencyStats()
        for i in range(1000):
            stats.add_sample((i % 97) / 10000.0)
        assert stats.percentile(0.8) <= stats.percentile(0.9) <= stats.percentile(0.95)

    def test_invalid_percentile(self):
        """Should reject quantiles outside [0, 1]."""
        stats = LatencyStats()
        with pytest.raises(ValueError):
            stats.percentile(95)
        with pytest.raises(ValueError):
            stats.percentile(-0.1)

    def test_zero_duration_sample_counts(self):
        """Samples below the histogram resolution still count."""
        stats = LatencyStats()
        stats.add_sample(0.0)
        assert stats.count() == 1

    def test_oversized_sample_is_clamped(self):
        stats = LatencyStats()
        stats.add_sample(2 * HISTOGRAM_HIGHEST_NS / NANOSECONDS_PER_SECOND)
        assert stats.count() == 1
        assert stats.percentile(1.0) == pytest.approx(
            HISTOGRAM_HIGHEST_NS / NANOSECONDS_PER_SECOND, rel=0.01
        )

    def test_concurrent_samples(self):
        """No sample should be lost when threads record concurrently."""
        stats = LatencyStats()

        def record():
            for _ in range(1000):
                stats.add_sample(0.001)

        threads = [threading.Thread(target=record) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.count() == 4000

    def test_clamp_warning_logged_once_across_threads(self, caplog):
        stats = LatencyStats(highest_ns=1000)

        def record():
            for _ in range(200):
                stats.add_sample(1.0)

        threads = [threading.Thread(target=record) for _ in range(8)]
        with caplog.at_level(logging.WARNING, logger="common.latency_stats"):
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        warnings = [r for r in caplog.records if "exceeds histogram range" in r.getMessage()]
        assert len(warnings) == 1
        assert stats.count() == 1600

    def test_sample_at_upper_bound_is_not_clamped(self, caplog):
        stats = LatencyStats(highest_ns=1000)
        with caplog.at_level(logging.WARNING, logger="common.latency_stats"):
            stats.add_sample(1000 / NANOSECONDS_PER_SECOND)
        assert not caplog.records
