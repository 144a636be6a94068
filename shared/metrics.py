"""
Shared metrics configuration for the trace throttle mock.
"""

from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry, generate_latest


# Segment counts per PutTraceSegments call
LOAD_BUCKETS = (0, 1, 2, 5, 10, 25, 50, 100, 250, 500, 1000)


class MetricsCollector:
    """Centralized metrics collector for a service.

    Each collector owns its own registry so several services (for example one
    per test) can coexist in a process without duplicate registrations.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service",
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

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type"],
            registry=self.registry
        )

        self._setup_throttle_metrics()

    def _setup_throttle_metrics(self):
        """Set up admission and mode metrics."""
        self._metrics["admission_decisions_total"] = Counter(
            "admission_decisions_total",
            "Total admission decisions",
            ["strategy", "verdict"],
            registry=self.registry
        )

        self._metrics["admission_load"] = Histogram(
            "admission_load",
            "Segments submitted per admission request",
            ["strategy"],
            buckets=LOAD_BUCKETS,
            registry=self.registry
        )

        self._metrics["mode_transitions_total"] = Counter(
            "mode_transitions_total",
            "Total operating mode transitions",
            ["mode"],
            registry=self.registry
        )

        self._metrics["throttle_mode"] = Gauge(
            "throttle_mode",
            "1 when the service is throttled, 0 when accepting",
            registry=self.registry
        )

        self._metrics["throttle_intensity"] = Gauge(
            "throttle_intensity",
            "Current throttle intensity percentage",
            registry=self.registry
        )

    def render(self) -> bytes:
        """Render the registry in Prometheus exposition format."""
        return generate_latest(self.registry)

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

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(error_type=error_type).inc()

    def record_admission(self, strategy: str, verdict: str, load: int):
        """Record one admission decision and the load it carried."""
        self._metrics["admission_decisions_total"].labels(strategy=strategy, verdict=verdict).inc()
        self._metrics["admission_load"].labels(strategy=strategy).observe(load)

    def record_mode(self, mode: str, intensity: int, throttled: bool):
        """Record a mode transition."""
        self._metrics["mode_transitions_total"].labels(mode=mode).inc()
        self._metrics["throttle_mode"].set(1 if throttled else 0)
        self._metrics["throttle_intensity"].set(intensity)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
