"""
Shared metrics configuration for the starfetch services.
"""

from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry keeps several services (and test instances)
        # in one process from clashing on metric names.
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        if self.service_name == "swapi":
            self._setup_swapi_metrics()

    def _setup_swapi_metrics(self):
        """Set up fetch/cache metrics for the SWAPI console service."""
        self._metrics["swapi_fetch_cycles_total"] = Counter(
            "swapi_fetch_cycles_total",
            "Total fetch cycles started",
            registry=self.registry
        )

        self._metrics["swapi_network_fetches_total"] = Counter(
            "swapi_network_fetches_total",
            "Total outbound fetches by outcome",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["swapi_cache_hits_total"] = Counter(
            "swapi_cache_hits_total",
            "Total endpoint cache hits",
            registry=self.registry
        )

        self._metrics["swapi_rendered_bytes_total"] = Counter(
            "swapi_rendered_bytes_total",
            "Cumulative serialized size of rendered payloads",
            registry=self.registry
        )

        self._metrics["swapi_cache_entries"] = Gauge(
            "swapi_cache_entries",
            "Number of cached endpoints",
            registry=self.registry
        )

        self._metrics["swapi_fetch_duration_seconds"] = Histogram(
            "swapi_fetch_duration_seconds",
            "Outbound fetch duration in seconds",
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            metric = self._metrics.get(operation_name)
            if metric is not None:
                (metric.labels(**labels) if labels else metric).observe(duration)

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        """Increment a counter metric."""
        metric = self._metrics.get(metric_name)
        if metric is not None:
            (metric.labels(**labels) if labels else metric).inc(amount)

    def set_gauge(self, metric_name: str, value: float, **labels):
        """Set a gauge metric value."""
        metric = self._metrics.get(metric_name)
        if metric is not None:
            (metric.labels(**labels) if labels else metric).set(value)

    def get_value(self, sample_name: str, **labels) -> Optional[float]:
        """Read a sample value back from this collector's registry."""
        return self.registry.get_sample_value(sample_name, labels or None)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
