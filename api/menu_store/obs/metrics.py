from __future__ import annotations
import time
from collections import Counter, defaultdict, deque
from typing import Dict, Any, Deque, Optional
from dataclasses import dataclass, field
from threading import RLock

@dataclass
class MetricPoint:
    """Individual metric measurement."""
    timestamp: float
    value: float
    labels: Dict[str, str] = field(default_factory=dict)

class MetricsRegistry:
    """In-process counters, histograms and gauges for store operations."""

    def __init__(self, histogram_size: int = 1000):
        self._lock = RLock()
        self._histogram_size = histogram_size
        self._counters: Dict[str, Counter] = defaultdict(Counter)
        self._histograms: Dict[str, Deque[MetricPoint]] = defaultdict(self._new_histogram)
        self._gauges: Dict[str, float] = {}

    def _new_histogram(self) -> Deque[MetricPoint]:
        return deque(maxlen=self._histogram_size)

    def increment_counter(self, name: str, labels: Optional[Dict[str, str]] = None, value: float = 1.0):
        with self._lock:
            self._counters[name][self._make_key(name, labels)] += value

    def record_histogram(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        with self._lock:
            self._histograms[name].append(MetricPoint(
                timestamp=time.time(),
                value=value,
                labels=labels or {}
            ))

    def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        with self._lock:
            self._gauges[self._make_key(name, labels)] = value

    def counter_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters[name][self._make_key(name, labels)] if name in self._counters else 0.0

    def gauge_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        with self._lock:
            return self._gauges.get(self._make_key(name, labels))

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of everything collected so far."""
        with self._lock:
            return {
                "counters": {name: dict(series) for name, series in self._counters.items()},
                "histograms": self._process_histograms(),
                "gauges": dict(self._gauges),
                "timestamp": time.time()
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()
            self._gauges.clear()

    def _make_key(self, name: str, labels: Optional[Dict[str, str]] = None) -> str:
        if not labels:
            return name

        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def _process_histograms(self) -> Dict[str, Any]:
        processed = {}
        for name, points in self._histograms.items():
            if not points:
                continue

            values = sorted(p.value for p in points)
            n = len(values)
            processed[name] = {
                "count": n,
                "sum": sum(values),
                "min": values[0],
                "max": values[-1],
                "mean": sum(values) / n,
                "p50": values[int(n * 0.5)],
                "p95": values[int(n * 0.95)],
                "p99": values[int(n * 0.99)],
            }

        return processed

# Global metrics registry
metrics_registry = MetricsRegistry()

def inc_counter(name: str, labels: Optional[Dict[str, str]] = None, value: float = 1.0):
    """Increment counter."""
    metrics_registry.increment_counter(name, labels, value)

def record_duration(name: str, duration_ms: float, labels: Optional[Dict[str, str]] = None):
    """Record duration in milliseconds."""
    metrics_registry.record_histogram(name, duration_ms, labels)

def set_gauge(name: str, value: float, labels: Optional[Dict[str, str]] = None):
    metrics_registry.set_gauge(name, value, labels)
