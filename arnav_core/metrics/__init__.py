"""
Metrics Module: Tick counters, pose reject reasons, histograms.

Usage:
    from arnav_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('ticks')
    metrics.increment_reject('yaw_accuracy')
    metrics.record_histogram('route_lookup_ms', 84.0)
"""

from .counters import MetricsCollector, CounterSnapshot

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'CounterSnapshot', 'get_metrics', 'reset_metrics']
