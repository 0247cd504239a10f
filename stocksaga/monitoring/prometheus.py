# ============================================
# FILE: stocksaga/monitoring/prometheus.py
# ============================================

"""
Prometheus metrics integration for stocksaga.

Quick Start:
    >>> from stocksaga.monitoring.prometheus import PrometheusMetrics, start_metrics_server
    >>>
    >>> start_metrics_server(port=8000)
    >>> config = SagaConfig(metrics=PrometheusMetrics())
"""

import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from stocksaga.types import OperationStatus, SagaStatus

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """
    Prometheus-compatible metrics collector for stocksaga.

    Exposes the following metrics:
        - <prefix>_execution_total: Counter of saga runs by name and terminal status
        - <prefix>_execution_duration_seconds: Histogram of saga durations
        - <prefix>_operation_total: Counter of store calls by operation and status
        - <prefix>_operation_duration_seconds: Histogram of store call durations
        - <prefix>_active_count: Gauge of currently running sagas
    """

    def __init__(self, prefix: str = "stocksaga", registry: CollectorRegistry | None = None):
        """
        Args:
            prefix: Metric name prefix
            registry: Registry to register with (default: the global registry)
        """
        registry = registry or REGISTRY
        self._prefix = prefix

        self._execution_total = Counter(
            f"{prefix}_execution_total",
            "Total saga executions",
            ["saga_name", "status"],
            registry=registry,
        )

        self._execution_duration = Histogram(
            f"{prefix}_execution_duration_seconds",
            "Saga execution duration in seconds",
            ["saga_name"],
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=registry,
        )

        self._operation_total = Counter(
            f"{prefix}_operation_total",
            "Total store operations issued by sagas",
            ["saga_name", "operation", "status"],
            registry=registry,
        )

        self._operation_duration = Histogram(
            f"{prefix}_operation_duration_seconds",
            "Store operation duration in seconds",
            ["saga_name", "operation"],
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
            registry=registry,
        )

        self._active_count = Gauge(
            f"{prefix}_active_count",
            "Number of currently running sagas",
            ["saga_name"],
            registry=registry,
        )

    def record_execution(self, saga_name: str, status: SagaStatus, duration: float) -> None:
        self._execution_total.labels(saga_name=saga_name, status=status.value).inc()
        self._execution_duration.labels(saga_name=saga_name).observe(duration)

    def record_operation(
        self, saga_name: str, operation: str, status: OperationStatus, duration: float
    ) -> None:
        self._operation_total.labels(
            saga_name=saga_name, operation=operation, status=status.value
        ).inc()
        self._operation_duration.labels(saga_name=saga_name, operation=operation).observe(duration)

    def saga_started(self, saga_name: str) -> None:
        self._active_count.labels(saga_name=saga_name).inc()

    def saga_finished(self, saga_name: str) -> None:
        self._active_count.labels(saga_name=saga_name).dec()


def start_metrics_server(port: int = 8000, addr: str = "0.0.0.0") -> None:
    """
    Start a Prometheus HTTP metrics server.

    Example:
        >>> start_metrics_server(port=8000)
        >>> # Metrics available at http://localhost:8000/metrics
    """
    start_http_server(port, addr)
    logger.info(f"Prometheus metrics server started on port {port}")
