"""
Acquisition counters and histograms.

Thread-safe because platform callbacks may land on foreign threads:
- Acquisition counts (started, succeeded, failed by kind)
- Provider outcomes (fix, timeout, no fix, permission missing)
- Drop reasons for every discarded fix or failed check
- Histograms (race latency, distances, accuracy)

Every discarded fix or failed check records a reason code.
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
    drop_reasons: Dict[str, int]
    histograms: Dict[str, List[float]]

    def total_dropped(self) -> int:
        """Total fixes/checks dropped across all reasons."""
        return sum(self.drop_reasons.values())

    def success_rate(self) -> float:
        """Successful acquisitions as a percentage of started ones."""
        started = self.counters.get('acquisitions_started', 0)
        if started == 0:
            return 0.0
        return (self.counters.get('acquisitions_succeeded', 0) / started) * 100.0


class MetricsCollector:
    """
    Thread-safe metrics collection.

    Usage:
        collector = MetricsCollector()
        collector.increment('acquisitions_started')
        collector.increment_drop('provider_timeout')
        collector.record_histogram('race_elapsed_ms', 812.0)

        snapshot = collector.snapshot()
        print(f"Success rate: {snapshot.success_rate():.1f}%")
    """

    DROP_REASONS = {
        'provider_timeout': 'Provider did not answer within its budget',
        'provider_no_fix': 'Provider answered without a fix',
        'provider_permission_missing': 'Location permission missing at request time',
        'provider_failure': 'Provider reported a failure',
        'provider_unavailable': 'Provider disabled at request time',
        'provider_disabled': 'Provider switched off while in flight',
        'stale_fix': 'Fix older than recency threshold',
        'low_accuracy': 'Accuracy radius above threshold',
        'distance_exceeded': 'Too far from last known fix',
        'stale_reference': 'Last known fix too old to compare against',
        'proximity_exceeded': 'Too far from reference location',
    }

    def __init__(self):
        """Initialize metrics collector."""
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)
        self._drop_reasons: Dict[str, int] = defaultdict(int)
        self._histograms: Dict[str, List[float]] = defaultdict(list)
        self._start_time = time.time()

        self._init_standard_counters()

    def _init_standard_counters(self):
        """Initialize standard counter keys."""
        standard_counters = [
            'acquisitions_started',
            'acquisitions_succeeded',
            'acquisitions_failed',
            'races_started',
            'races_deadline_expired',
            'gps_fixes_received',
            'network_fixes_received',
            'fused_fixes_received',
            'winner_gps',
            'winner_network',
            'winner_fused',
            'validations_passed',
            'proximity_passed',
        ]

        with self._lock:
            for counter in standard_counters:
                if counter not in self._counters:
                    self._counters[counter] = 0

            for reason in self.DROP_REASONS:
                if reason not in self._drop_reasons:
                    self._drop_reasons[reason] = 0

    def increment(self, counter_name: str, value: int = 1):
        """
        Increment a counter by value.

        Args:
            counter_name: Name of counter to increment
            value: Amount to increment (default 1)
        """
        with self._lock:
            self._counters[counter_name] += value

    def increment_drop(self, reason: str, value: int = 1):
        """
        Increment drop counter for specific reason.

        Args:
            reason: Drop reason code (should be in DROP_REASONS)
            value: Amount to increment (default 1)
        """
        if reason not in self.DROP_REASONS:
            logger.warning(f"Unknown drop reason '{reason}'")

        with self._lock:
            self._drop_reasons[reason] += value
            self._counters['dropped_total'] += value

    def get_counter(self, counter_name: str) -> int:
        """Current value of a counter (0 if never incremented)."""
        with self._lock:
            return self._counters.get(counter_name, 0)

    def get_drop_count(self, reason: str) -> int:
        """Current count for a drop reason."""
        with self._lock:
            return self._drop_reasons.get(reason, 0)

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
                self._histograms[histogram_name] = samples[-max_samples // 2:]

    def get_histogram_stats(self, histogram_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a histogram.

        Returns:
            Dict with count, min, max, mean, median, p95
            None if histogram is empty
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
        """Copy of current metrics state."""
        with self._lock:
            return CounterSnapshot(
                timestamp=time.time(),
                counters=dict(self._counters),
                drop_reasons=dict(self._drop_reasons),
                histograms={k: list(v) for k, v in self._histograms.items()},
            )

    def reset(self):
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._counters.clear()
            self._drop_reasons.clear()
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
        print(f"  ACQUISITION METRICS (uptime: {uptime:.1f}s, "
              f"success rate: {snapshot.success_rate():.1f}%)")
        print("=" * 70)

        print("\nCOUNTERS:")
        for name, value in sorted(snapshot.counters.items()):
            print(f"  {name:30s}: {value:8d}")

        total_dropped = snapshot.total_dropped()
        if total_dropped > 0:
            print("\nDROP REASONS:")
            for reason, count in sorted(snapshot.drop_reasons.items()):
                if count > 0:
                    pct = (count / total_dropped) * 100
                    print(f"  {reason:30s}: {count:8d} ({pct:5.1f}%)")

        if snapshot.histograms:
            print("\nHISTOGRAMS:")
            for name in sorted(snapshot.histograms.keys()):
                stats = self.get_histogram_stats(name)
                if stats:
                    print(f"  {name}: count={stats['count']}, mean={stats['mean']:.3f}, "
                          f"median={stats['median']:.3f}, p95={stats['p95']:.3f}")

        print("=" * 70 + "\n")
