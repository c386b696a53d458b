"""
Prometheus metrics for the sales API.

GET /metrics serves request counters/latency and the sale counters
(created by payment method, rejected by reason, canceled).
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import time
import os

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share samples through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = REGISTRY

http_requests_total = Counter(
    'http_requests_total',
    'HTTP requests served',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'HTTP requests being served',
    registry=_metric_registry
)

sales_created_total = Counter(
    'sales_created_total',
    'Sales committed',
    ['payment_method'],
    registry=_metric_registry
)

sales_rejected_total = Counter(
    'sales_rejected_total',
    'Sale creations rejected before or during the write',
    ['reason'],
    registry=_metric_registry
)

sales_canceled_total = Counter(
    'sales_canceled_total',
    'Sale cancellation requests served',
    registry=_metric_registry
)


def record_sale_created(payment_method: str) -> None:
    sales_created_total.labels(payment_method=payment_method).inc()


def record_sale_rejected(reason: str) -> None:
    """reason is the error payload type, e.g. 'product_unavailable' or 'validation'."""
    sales_rejected_total.labels(reason=reason).inc()


def record_sale_canceled() -> None:
    sales_canceled_total.inc()


def setup_metrics_instrumentation(app):
    """Time every request and count it by endpoint and status."""

    @app.before_request
    def start_request_timer():
        g._request_started_at = time.time()
        http_requests_in_flight.inc()

    @app.after_request
    def observe_request(response):
        started_at = g.pop('_request_started_at', None)
        if started_at is None:
            return response
        try:
            endpoint = request.endpoint or 'unknown'
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - started_at)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                http_status=response.status_code
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record request metrics: {e}")
        finally:
            http_requests_in_flight.dec()
        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus scrape endpoint. Unauthenticated: keep it off public networks."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
