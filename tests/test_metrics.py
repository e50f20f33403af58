"""
Unit tests for metrics module.

Tests cover:
- Counter increment (single-threaded and multi-threaded)
- Pose reject reason tracking
- Histogram recording and statistics
- Snapshot and reset functionality
"""

import logging
import threading

import pytest

from arnav_core.metrics import MetricsCollector, get_metrics, reset_metrics
from arnav_core.metrics.counters import CounterSnapshot


class TestMetricsCollectorBasic:
    """Tests for basic metrics collector functionality."""

    def test_initialization(self):
        collector = MetricsCollector()

        assert collector.get_counter('ticks') == 0
        assert collector.get_counter('route_failures') == 0
        assert collector.get_counter('unknown_counter') == 0

    def test_increment_counter(self):
        collector = MetricsCollector()

        collector.increment('ticks')
        collector.increment('ticks', 5)
        assert collector.get_counter('ticks') == 6

    def test_increment_reject_with_valid_reason(self):
        collector = MetricsCollector()

        collector.increment_reject('yaw_accuracy')
        assert collector.get_counter('poses_rejected') == 1
        assert collector.snapshot().reject_reasons['yaw_accuracy'] == 1

    def test_increment_reject_unknown_reason(self, caplog):
        """Unknown reasons log a warning but are still counted."""
        collector = MetricsCollector()

        with caplog.at_level(logging.WARNING, logger='arnav_core.metrics.counters'):
            collector.increment_reject('cosmic_rays')

        assert 'cosmic_rays' in caplog.text
        assert collector.get_reject_count('cosmic_rays') == 1
        assert collector.get_counter('poses_rejected') == 1

    def test_reject_rate(self):
        collector = MetricsCollector()
        collector.increment_reject('no_pose', 3)
        collector.increment_reject('horizontal_accuracy', 1)

        snapshot = collector.snapshot()
        assert snapshot.total_rejected() == 4
        assert snapshot.reject_rate(8) == pytest.approx(50.0)
        assert snapshot.reject_rate(0) == 0.0


class TestMetricsHistograms:
    """Tests for histogram recording."""

    def test_histogram_stats(self):
        collector = MetricsCollector()
        for value in [1.0, 2.0, 3.0, 4.0]:
            collector.record_histogram('route_lookup_ms', value)

        stats = collector.get_histogram_stats('route_lookup_ms')
        assert stats['count'] == 4
        assert stats['min'] == 1.0
        assert stats['max'] == 4.0
        assert stats['mean'] == pytest.approx(2.5)

    def test_empty_histogram(self):
        assert MetricsCollector().get_histogram_stats('nothing') is None

    def test_histogram_bounded(self):
        collector = MetricsCollector()
        for i in range(25):
            collector.record_histogram('h', float(i), max_samples=10)

        assert collector.get_histogram_stats('h')['count'] <= 10


class TestMetricsSnapshotAndReset:
    """Tests for snapshot() and reset()."""

    def test_snapshot_is_copy(self):
        collector = MetricsCollector()
        collector.increment('ticks')
        snapshot = collector.snapshot()
        collector.increment('ticks')

        assert isinstance(snapshot, CounterSnapshot)
        assert snapshot.counters['ticks'] == 1

    def test_reset(self):
        collector = MetricsCollector()
        collector.increment('ticks', 3)
        collector.record_histogram('h', 1.0)
        collector.reset()

        assert collector.get_counter('ticks') == 0
        assert collector.get_histogram_stats('h') is None

    def test_print_summary(self, capsys):
        collector = MetricsCollector()
        collector.increment_reject('yaw_accuracy')
        collector.record_histogram('route_lookup_ms', 12.0)
        collector.print_summary()

        out = capsys.readouterr().out
        assert 'SESSION METRICS' in out
        assert 'yaw_accuracy' in out
        assert 'route_lookup_ms' in out


class TestMetricsThreadSafety:
    """Tests for concurrent access."""

    def test_concurrent_increments(self):
        collector = MetricsCollector()

        def worker():
            for _ in range(1000):
                collector.increment('ticks')

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.get_counter('ticks') == 8000


class TestGlobalMetrics:
    """Tests for the global singleton."""

    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_reset_metrics_replaces_singleton(self):
        first = get_metrics()
        reset_metrics()
        assert get_metrics() is not first
