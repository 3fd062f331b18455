from .registry import (
    RECORDS_ENQUEUED_TOTAL,
    RECORDS_REJECTED_TOTAL,
    BATCHES_DELIVERED_TOTAL,
    EVENTS_DELIVERED_TOTAL,
    SEND_RETRIES_TOTAL,
    DELIVERY_FAILURES_TOTAL,
    FAIL_STOPS_TOTAL,
    QUEUE_DEPTH,
)

__all__ = [
    "RECORDS_ENQUEUED_TOTAL",
    "RECORDS_REJECTED_TOTAL",
    "BATCHES_DELIVERED_TOTAL",
    "EVENTS_DELIVERED_TOTAL",
    "SEND_RETRIES_TOTAL",
    "DELIVERY_FAILURES_TOTAL",
    "FAIL_STOPS_TOTAL",
    "QUEUE_DEPTH",
]
