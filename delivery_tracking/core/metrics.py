"""
Prometheus metrics for the tracking subsystem.

Exposes metrics for:
- Tracking event fan-out
- Subscriptions and connection state
- External request latency and counts
- Distance-matrix batches and cache hit rates
"""

import time
from functools import wraps
from typing import Callable

from prometheus_client import Counter, Gauge, Histogram

from delivery_tracking.core.config import settings

# ============================================================
# Tracking Metrics
# ============================================================

TRACKING_EVENTS_TOTAL = Counter(
    "tracking_events_total",
    "Inbound order-tracking events",
    ["outcome"],
)

TRACKING_LISTENER_ERRORS = Counter(
    "tracking_listener_errors_total",
    "Tracking listeners that raised during dispatch",
)

TRACKING_SUBSCRIPTIONS_ACTIVE = Gauge(
    "tracking_subscriptions_active",
    "Registered tracking listeners",
)

TRACKING_CONNECTION_STATE = Gauge(
    "tracking_connection_state",
    "Shared tracking connection state (1 = current)",
    ["state"],
)


# ============================================================
# External Service Metrics
# ============================================================

EXTERNAL_REQUEST_DURATION = Histogram(
    "external_request_duration_seconds",
    "External service request duration",
    ["service", "operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

EXTERNAL_REQUEST_TOTAL = Counter(
    "external_requests_total",
    "Total external service requests",
    ["service", "operation", "status"],
)

DISTANCE_MATRIX_BATCHES = Counter(
    "distance_matrix_batches_total",
    "Distance-matrix batches by outcome",
    ["status"],
)


# ============================================================
# Cache Metrics
# ============================================================

CACHE_HITS = Counter(
    "cache_hits_total",
    "Cache hits",
    ["cache_type"],
)

CACHE_MISSES = Counter(
    "cache_misses_total",
    "Cache misses",
    ["cache_type"],
)


# ============================================================
# Helper Functions
# ============================================================


def track_external_request(service: str, operation: str):
    """
    Decorator to track external service requests.

    Usage:
        @track_external_request("backend", "directions")
        async def get_directions(...):
            ...
    """

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.METRICS_ENABLED:
                return await func(*args, **kwargs)

            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
                EXTERNAL_REQUEST_TOTAL.labels(
                    service=service,
                    operation=operation,
                    status="success",
                ).inc()
                return result
            except Exception:
                EXTERNAL_REQUEST_TOTAL.labels(
                    service=service,
                    operation=operation,
                    status="error",
                ).inc()
                raise
            finally:
                duration = time.perf_counter() - start_time
                EXTERNAL_REQUEST_DURATION.labels(
                    service=service,
                    operation=operation,
                ).observe(duration)

        return wrapper

    return decorator


def track_tracking_event(outcome: str):
    """Count an inbound tracking event (dispatched, dropped_unsubscribed, invalid_payload)."""
    if settings.METRICS_ENABLED:
        TRACKING_EVENTS_TOTAL.labels(outcome=outcome).inc()


def track_listener_error():
    """Count a listener that raised during dispatch."""
    if settings.METRICS_ENABLED:
        TRACKING_LISTENER_ERRORS.inc()


def update_subscription_count(count: int):
    """Set the number of registered listeners."""
    if settings.METRICS_ENABLED:
        TRACKING_SUBSCRIPTIONS_ACTIVE.set(count)


def update_connection_state(current: str, states: list[str]):
    """Flag the current connection state, clearing the others."""
    if not settings.METRICS_ENABLED:
        return
    for state in states:
        TRACKING_CONNECTION_STATE.labels(state=state).set(1 if state == current else 0)


def track_matrix_batch(success: bool):
    """Record a distance-matrix batch outcome."""
    if settings.METRICS_ENABLED:
        DISTANCE_MATRIX_BATCHES.labels(status="success" if success else "error").inc()


def track_cache(cache_type: str, hit: bool):
    """Record cache hit or miss."""
    if not settings.METRICS_ENABLED:
        return
    if hit:
        CACHE_HITS.labels(cache_type=cache_type).inc()
    else:
        CACHE_MISSES.labels(cache_type=cache_type).inc()
