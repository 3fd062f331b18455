"""
Prometheus metrics for the log shipper, registered in the global REGISTRY.
All series are labelled by target log group and stream.
"""

from prometheus_client import Counter, Gauge

_LABELS = ["group", "stream"]

RECORDS_ENQUEUED_TOTAL = Counter(
    "logstream_records_enqueued_total",
    "Records accepted into the shipper queue",
    _LABELS,
)

RECORDS_REJECTED_TOTAL = Counter(
    "logstream_records_rejected_total",
    "Records rejected by the ingestion filter",
    _LABELS,
)

BATCHES_DELIVERED_TOTAL = Counter(
    "logstream_batches_delivered_total",
    "Successful batch appends",
    _LABELS,
)

EVENTS_DELIVERED_TOTAL = Counter(
    "logstream_events_delivered_total",
    "Log events delivered to the destination",
    _LABELS,
)

SEND_RETRIES_TOTAL = Counter(
    "logstream_send_retries_total",
    "Batch sends retried after a retryable destination error",
    _LABELS,
)

DELIVERY_FAILURES_TOTAL = Counter(
    "logstream_delivery_failures_total",
    "Unrecoverable destination failures handed to the recovery hook",
    _LABELS + ["phase"],
)

FAIL_STOPS_TOTAL = Counter(
    "logstream_fail_stops_total",
    "Shippers permanently disabled after a fatal error",
    _LABELS,
)

QUEUE_DEPTH = Gauge(
    "logstream_queue_depth",
    "Log events waiting in the shipper queue",
    _LABELS,
)
