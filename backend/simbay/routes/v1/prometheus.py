"""
Prometheus metrics endpoint.

Public, following standard Prometheus practice. Exposes the metrics
collected by ``BaseService.measure_operation`` and the booking and
notification counters.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/metrics/prometheus")
def prometheus_endpoint() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
