"""
Metrics Collector Utility for blib

Prometheus metrics for statement building and structural diffs. Every
collector owns its registry unless one is passed in, so embedding
applications decide what gets exposed.
"""

from typing import Any, Dict, Optional
from prometheus_client import Counter, Histogram, CollectorRegistry
import logging
import time
from functools import wraps

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Registers and updates Prometheus metrics under a common namespace.
    """

    def __init__(
        self,
        namespace: str = "blib",
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Initialize metrics collector.

        Args:
            namespace: Metric namespace prefix
            registry: Prometheus registry (a private one is created if not provided)
        """
        self.namespace = namespace
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}

        logger.debug(f"Initialized MetricsCollector with namespace: {namespace}")

    def _full_name(self, name: str) -> str:
        return f"{self.namespace}_{name}"

    def create_counter(
        self,
        name: str,
        description: str,
        labels: Optional[list] = None
    ) -> Counter:
        """
        Create or retrieve a counter metric.

        Args:
            name: Metric name
            description: Metric description
            labels: Optional list of label names

        Returns:
            Prometheus Counter instance
        """
        full_name = self._full_name(name)

        if full_name not in self._metrics:
            self._metrics[full_name] = Counter(
                full_name,
                description,
                labelnames=labels or [],
                registry=self.registry
            )
            logger.debug(f"Created counter: {full_name}")

        return self._metrics[full_name]

    def create_histogram(
        self,
        name: str,
        description: str,
        labels: Optional[list] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        """
        Create or retrieve a histogram metric.

        Args:
            name: Metric name
            description: Metric description
            labels: Optional list of label names
            buckets: Optional histogram buckets

        Returns:
            Prometheus Histogram instance
        """
        full_name = self._full_name(name)

        if full_name not in self._metrics:
            kwargs = {
                "name": full_name,
                "documentation": description,
                "labelnames": labels or [],
                "registry": self.registry
            }

            if buckets:
                kwargs["buckets"] = buckets

            self._metrics[full_name] = Histogram(**kwargs)
            logger.debug(f"Created histogram: {full_name}")

        return self._metrics[full_name]

    def increment_counter(self, name: str, value: float = 1.0, labels: Optional[Dict] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name (without namespace prefix)
            value: Amount to increment by
            labels: Optional label values
        """
        counter = self.get_metric(name)

        if counter is None:
            logger.warning(f"Counter {self._full_name(name)} not found")
        elif labels:
            counter.labels(**labels).inc(value)
        else:
            counter.inc(value)

    def observe_histogram(self, name: str, value: float, labels: Optional[Dict] = None) -> None:
        """
        Record a value in a histogram metric.

        Args:
            name: Histogram name (without namespace prefix)
            value: Value to observe
            labels: Optional label values
        """
        histogram = self.get_metric(name)

        if histogram is None:
            logger.warning(f"Histogram {self._full_name(name)} not found")
        elif labels:
            histogram.labels(**labels).observe(value)
        else:
            histogram.observe(value)

    def time_function(self, metric_name: str, labels: Optional[Dict] = None):
        """
        Decorator timing a function into a histogram.

        The duration is recorded whether the call returns or raises.

        Args:
            metric_name: Name of histogram metric to record timing
            labels: Optional label values
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                try:
                    return func(*args, **kwargs)
                finally:
                    duration = time.perf_counter() - start_time
                    self.observe_histogram(metric_name, duration, labels)
            return wrapper
        return decorator

    def get_metric(self, name: str):
        """
        Retrieve a metric by name.

        Args:
            name: Metric name (with or without namespace)

        Returns:
            Metric instance or None
        """
        if name in self._metrics:
            return self._metrics[name]
        return self._metrics.get(self._full_name(name))


_default_collector: Optional[MetricsCollector] = None


def get_default_collector() -> MetricsCollector:
    """
    Get or create the process-wide collector with the blib metrics registered.
    """
    global _default_collector

    if _default_collector is None:
        _default_collector = setup_blib_metrics(MetricsCollector())
        logger.debug("Created default metrics collector")

    return _default_collector


def setup_blib_metrics(collector: Optional[MetricsCollector] = None) -> MetricsCollector:
    """
    Register the standard blib metrics.

    Args:
        collector: Collector to register on (uses default if not provided)

    Returns:
        The collector
    """
    if collector is None:
        return get_default_collector()

    collector.create_counter(
        "statements_built_total",
        "Total number of SQL statements built",
        labels=["operation"]
    )

    collector.create_counter(
        "build_errors_total",
        "Total number of rejected SQL build requests",
        labels=["operation", "error_kind"]
    )

    collector.create_counter(
        "diff_changes_total",
        "Total number of leaf changes reported by structural diffs"
    )

    collector.create_histogram(
        "processing_duration_seconds",
        "Time spent building statements or computing diffs",
        labels=["operation"],
        buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0)
    )

    return collector
