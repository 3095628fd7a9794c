"""
Prometheus exposition for the POS API.

Request traffic is labelled by Flask endpoint name. Live event streams stay
open for as long as a screen is connected, so they are counted in their own
gauge and kept out of the latency histogram.

/metrics is unauthenticated; keep it on the internal network.
"""
import os
import time

from flask import Blueprint, Response, g, request
from prometheus_client import (
    CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, Gauge, Histogram,
    generate_latest, multiprocess
)

metrics_bp = Blueprint('metrics', __name__)

STREAM_ENDPOINT = 'events.stream'


def _registries():
    """
    (registry read by /metrics, registry new metrics register with).

    Under gunicorn with PROMETHEUS_MULTIPROC_DIR set, each worker writes its
    samples to that directory and a fresh collector merges them on scrape.
    """
    if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
        merged = CollectorRegistry()
        multiprocess.MultiProcessCollector(merged)
        return merged, None
    return REGISTRY, REGISTRY


scrape_registry, _owner = _registries()

api_requests = Counter(
    'cafepos_http_requests_total',
    'API requests served, by endpoint and response status',
    ['method', 'endpoint', 'status'],
    registry=_owner
)

api_latency = Histogram(
    'cafepos_http_request_seconds',
    'Time spent producing an API response',
    ['endpoint'],
    registry=_owner,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

api_requests_active = Gauge(
    'cafepos_http_requests_active',
    'API requests currently being handled',
    registry=_owner,
    multiprocess_mode='livesum'
)

event_streams_open = Gauge(
    'cafepos_event_streams_open',
    'Kitchen and admin screens connected to the live order stream',
    registry=_owner,
    multiprocess_mode='livesum'
)

orders_placed_total = Counter(
    'cafepos_orders_placed_total',
    'Orders placed from the point of sale',
    registry=_owner
)


def setup_metrics_instrumentation(app):
    """Feed the request metrics from app-wide request hooks."""

    @app.before_request
    def start_request_timer():
        if request.endpoint != STREAM_ENDPOINT:
            g.request_started = time.perf_counter()
            api_requests_active.inc()

    @app.after_request
    def record_request(response):
        endpoint = request.endpoint or 'unmatched'
        try:
            api_requests.labels(request.method, endpoint, response.status_code).inc()
            started = g.pop('request_started', None)
            if started is not None:
                api_latency.labels(endpoint).observe(time.perf_counter() - started)
                api_requests_active.dec()
        except Exception as e:
            app.logger.warning(f"Could not record request metrics for {endpoint}: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    return Response(generate_latest(scrape_registry), mimetype=CONTENT_TYPE_LATEST)
