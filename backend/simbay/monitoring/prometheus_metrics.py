"""
Prometheus metrics module for SimBay.

Service timings recorded by ``@measure_operation`` are exported here,
alongside a few domain counters, on a dedicated registry.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "simbay_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "simbay_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "simbay_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_rejections_total = Counter(
    "simbay_booking_rejections_total",
    "Booking attempts rejected by the slot allocator",
    ["reason"],  # slot_conflict | quota_exceeded | permission_denied | validation
    registry=REGISTRY,
)

notifications_total = Counter(
    "simbay_notifications_total",
    "Notification send attempts by outcome",
    ["template", "status"],  # sent | failed
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers don't touch metric objects directly."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str,
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def inc_booking_rejection(reason: str) -> None:
        booking_rejections_total.labels(reason=reason).inc()

    @staticmethod
    def record_notification(template: str, status: str) -> None:
        notifications_total.labels(template=template, status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
