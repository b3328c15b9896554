"""
Shared metrics configuration for the feature permissions engine.
"""

from prometheus_client import REGISTRY, Counter, Histogram, Gauge, CollectorRegistry
from typing import Any, Dict, Optional
import time
import threading
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for the engine."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up permission evaluation metrics."""
        self._metrics["permission_evaluations_total"] = Counter(
            "permission_evaluations_total",
            "Total permission evaluations",
            ["decision", "mode"],
            registry=self.registry
        )

        self._metrics["permission_evaluation_duration_seconds"] = Histogram(
            "permission_evaluation_duration_seconds",
            "Permission evaluation duration in seconds",
            registry=self.registry
        )

        self._metrics["decision_cache_hits_total"] = Counter(
            "decision_cache_hits_total",
            "Total decision cache hits",
            registry=self.registry
        )

        self._metrics["decision_cache_misses_total"] = Counter(
            "decision_cache_misses_total",
            "Total decision cache misses",
            registry=self.registry
        )

        self._metrics["feature_registry_features"] = Gauge(
            "feature_registry_features",
            "Number of features in the most recently built registry",
            ["feature_type"],
            registry=self.registry
        )

    def record_evaluation(self, decision: str, mode: str):
        """Record a computed (non-cached) evaluation."""
        self._metrics["permission_evaluations_total"].labels(decision=decision, mode=mode).inc()

    def record_cache_lookup(self, hit: bool):
        """Record a decision cache lookup."""
        name = "decision_cache_hits_total" if hit else "decision_cache_misses_total"
        self._metrics[name].inc()

    def record_registry_size(self, counts: Dict[str, int]):
        """Publish per-type feature counts."""
        with self._lock:
            for feature_type, count in counts.items():
                self._metrics["feature_registry_features"].labels(feature_type=feature_type).set(count)

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            metric = self._metrics.get(operation_name)
            if metric is not None:
                (metric.labels(**labels) if labels else metric).observe(duration)

    def sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample back from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service.

    Without an explicit registry one collector per service name is shared
    so metric families are only registered once.
    """
    if registry is not None:
        return MetricsCollector(service_name, registry)
    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name)
            _collectors[service_name] = collector
        return collector
