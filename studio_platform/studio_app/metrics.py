"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REQUEST_COUNT = Counter(
    "studio_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "studio_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint"],
)
ORDER_EVENTS = Counter(
    "studio_order_events_total",
    "Order lifecycle events",
    ["event"],
)
PAYOUTS = Counter(
    "studio_payouts_total",
    "Producer payouts by method",
    ["method"],
)

APPLICATION_EVENTS = Counter(
    "studio_producer_applications_total",
    "Producer application submissions and decisions",
    ["event"],
)

def record_request(method: str, endpoint: str, status: int, latency: float) -> None:
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)


def record_order_event(event: str) -> None:
    ORDER_EVENTS.labels(event=event).inc()


def record_payout(method: str) -> None:
    PAYOUTS.labels(method=method).inc()


def record_application_event(event: str) -> None:
    APPLICATION_EVENTS.labels(event=event).inc()

def latest_metrics() -> tuple[bytes, str]:
    data = generate_latest()
    return data, CONTENT_TYPE_LATEST
