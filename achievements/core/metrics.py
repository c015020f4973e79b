"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behavior import the one they need and update it at the point of
action.  Counters only go up, so tests assert on deltas.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests by method, route template and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Time to produce a response, in seconds",
    ["method", "endpoint"],
    # The store is in memory; most requests finish in single-digit milliseconds.
    buckets=[0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Requests currently inside the app",
)

# ---------------------------------------------------------------------------
# Store metrics
# ---------------------------------------------------------------------------

ACHIEVEMENT_OPERATIONS = Counter(
    "achievement_operations_total",
    "Store operations by outcome",
    # operation: create|update|delete|set_max_per_owner|set_creation_fee
    # result: "ok" or the error kind, e.g. "InvalidTitle"
    ["operation", "result"],
)

FEE_TRANSFER_REQUESTS = Counter(
    "fee_transfer_requests_total",
    "Creation-fee transfer intents emitted by the store",
)

FEE_TRANSFER_AMOUNT = Counter(
    "fee_transfer_amount_total",
    "Sum of creation fees requested, in ledger units",
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Tasks waiting in a queue, sampled on enqueue and dequeue",
    ["queue_name"],
)

FEE_RELAY_FAILURES = Counter(
    "fee_relay_failures_total",
    "Fee transfer intents that could not be queued and went back to the outbox",
)
