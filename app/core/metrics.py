"""Prometheus metric inventory.

All metrics are defined here; other modules import and update them at the
point of action.  ``GET /metrics`` exposes the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, route, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # The callback waits on Stripe, so the upper buckets matter here.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Stripe Connect flow
# ---------------------------------------------------------------------------

STRIPE_CONNECT_EVENTS = Counter(
    "stripe_connect_events_total",
    "Stripe Connect OAuth steps by outcome",
    ["step", "outcome"],  # step: authorize|callback ; outcome: redirected|linked|rejected|upstream_failure
)

STRIPE_TOKEN_EXCHANGE_DURATION = Histogram(
    "stripe_token_exchange_duration_seconds",
    "Duration of the server-to-server code-for-token exchange",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
