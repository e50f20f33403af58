"""
Metrics counters and histograms implementation.

Provides thread-safe counters for:
- Tick counts (ticks run, ticks gated out, settle ticks)
- Pose rejection reasons (no_pose, horizontal_accuracy, yaw_accuracy, etc.)
- Route statistics (lookups, failures, anchors placed)
- Histograms (pose accuracy, route lookup latency)

Every rejected pose is counted against a reason code so a localization
stall can be explained after the fact.
"""

import logging
import threading
import time
from typing import Dict, List, Optional
from dataclasses import dataclass
from collections import defaultdict
import statistics

logger = logging.getLogger(__name__)


@dataclass
class CounterSnapshot:
    """Snapshot of counter state at a point in time."""

    timestamp: float
    counters: Dict[str, int]
    reject_reasons: Dict[str, int]
    histograms: Dict[str, List[float]]

    def total_rejected(self) -> int:
        """Total poses rejected across all reasons."""
        return sum(self.reject_reasons.values())

    def reject_rate(self, total_poses: int) -> float:
        """Calculate pose rejection rate as percentage."""
        if total_poses == 0:
            return 0.0
        return (self.total_rejected() / total_poses) * 100.0


class MetricsCollector:
    """
    Thread-safe metrics collection.

    Background tasks (route lookups, availability checks) record from their
    own threads, so every access goes through a lock.

    Usage:
        collector = MetricsCollector()
        collector.increment('ticks')
        collector.increment_reject('yaw_accuracy')
        collector.record_histogram('route_lookup_ms', 84.0)

        snapshot = collector.snapshot()
        print(f"Total rejected: {snapshot.total_rejected()}")
    """

    # Standard pose rejection reason codes
    REJECT_REASONS = {
        'earth_not_enabled': 'Earth state not ENABLED',
        'no_pose': 'Tracking not confident, no pose reported',
        'session_not_ready': 'Session not tracking or location service not running',
        'horizontal_accuracy': 'Horizontal accuracy above threshold',
        'yaw_accuracy': 'Orientation yaw accuracy above threshold',
    }

    def __init__(self):
        """Initialize metrics collector."""
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)
        self._reject_reasons: Dict[str, int] = defaultdict(int)
        self._histograms: Dict[str, List[float]] = defaultdict(list)
        self._start_time = time.time()

        self._init_standard_counters()

    def _init_standard_counters(self):
        """Initialize standard counter keys so reports are consistent."""
        standard_counters = [
            'ticks',
            'ticks_gated',
            'poses_evaluated',
            'poses_accepted',
            'localization_achieved',
            'localization_lost',
            'localization_timeouts',
            'route_requests',
            'route_failures',
            'anchors_placed',
            'anchor_failures',
        ]

        with self._lock:
            for counter in standard_counters:
                if counter not in self._counters:
                    self._counters[counter] = 0

            for reason in self.REJECT_REASONS:
                if reason not in self._reject_reasons:
                    self._reject_reasons[reason] = 0

    def increment(self, counter_name: str, value: int = 1):
        """
        Increment a counter by value.

        Args:
            counter_name: Name of counter to increment
            value: Amount to increment (default 1)
        """
        with self._lock:
            self._counters[counter_name] += value

    def increment_reject(self, reason: str, value: int = 1):
        """
        Increment rejection counter for a specific reason.

        Args:
            reason: Reject reason code (should be in REJECT_REASONS)
            value: Amount to increment (default 1)
        """
        if reason not in self.REJECT_REASONS:
            logger.warning(f"Unknown pose reject reason '{reason}'")

        with self._lock:
            self._reject_reasons[reason] += value
            self._counters['poses_rejected'] += value

    def get_counter(self, counter_name: str) -> int:
        """Get current value of a counter (0 if never touched)."""
        with self._lock:
            return self._counters.get(counter_name, 0)

    def get_reject_count(self, reason: str) -> int:
        """Get current rejection count for a reason."""
        with self._lock:
            return self._reject_reasons.get(reason, 0)

    def record_histogram(self, histogram_name: str, value: float, max_samples: int = 10000):
        """
        Record a value in a histogram.

        Args:
            histogram_name: Name of histogram
            value: Value to record
            max_samples: Maximum samples to keep (prevents unbounded growth)
        """
        with self._lock:
            samples = self._histograms[histogram_name]
            samples.append(value)

            if len(samples) > max_samples:
                # Keep most recent half
                self._histograms[histogram_name] = samples[-max_samples//2:]

    def get_histogram_stats(self, histogram_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a histogram.

        Returns:
            Dict with min, max, mean, median, p95, count.
            None if histogram is empty.
        """
        with self._lock:
            samples = self._histograms.get(histogram_name, [])

            if not samples:
                return None

            sorted_samples = sorted(samples)
            count = len(sorted_samples)

            return {
                'count': count,
                'min': sorted_samples[0],
                'max': sorted_samples[-1],
                'mean': statistics.mean(sorted_samples),
                'median': statistics.median(sorted_samples),
                'p95': sorted_samples[int(count * 0.95)] if count > 1 else sorted_samples[0],
            }

    def snapshot(self) -> CounterSnapshot:
        """Get a snapshot with copies of all metrics."""
        with self._lock:
            return CounterSnapshot(
                timestamp=time.time(),
                counters=dict(self._counters),
                reject_reasons=dict(self._reject_reasons),
                histograms={k: list(v) for k, v in self._histograms.items()},
            )

    def reset(self):
        """Reset all metrics."""
        with self._lock:
            self._counters.clear()
            self._reject_reasons.clear()
            self._histograms.clear()
            self._start_time = time.time()
        self._init_standard_counters()

    def get_uptime(self) -> float:
        """Get uptime in seconds since initialization."""
        return time.time() - self._start_time

    def print_summary(self):
        """Print human-readable metrics summary."""
        snapshot = self.snapshot()
        uptime = self.get_uptime()

        print("\n" + "=" * 70)
        print(f"  SESSION METRICS (uptime: {uptime:.1f}s)")
        print("=" * 70)

        print("\nCOUNTERS:")
        for name, value in sorted(snapshot.counters.items()):
            print(f"  {name:30s}: {value:8d}")

        total_rejected = snapshot.total_rejected()
        if total_rejected > 0:
            print("\nPOSE REJECT REASONS:")
            for reason, count in sorted(snapshot.reject_reasons.items()):
                if count > 0:
                    pct = (count / total_rejected) * 100
                    print(f"  {reason:30s}: {count:8d} ({pct:5.1f}%)")

        if snapshot.histograms:
            print("\nHISTOGRAMS:")
            for name in sorted(snapshot.histograms.keys()):
                stats = self.get_histogram_stats(name)
                if stats:
                    print(f"  {name}:")
                    print(f"    count={stats['count']}, mean={stats['mean']:.3f}, "
                          f"p95={stats['p95']:.3f}, max={stats['max']:.3f}")

        print("=" * 70 + "\n")
