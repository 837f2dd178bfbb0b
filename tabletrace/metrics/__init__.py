from .registry import (
    CHANGE_EVENTS_TOTAL,
    COUNTER_FETCH_LATENCY_SECONDS,
    COUNTER_FETCH_TOTAL,
    DEBOUNCE_FETCHES,
    DEBOUNCE_TOTAL,
    POLL_CYCLES_TOTAL,
    ROW_DIFFS_TOTAL,
    ROW_FETCH_FAILURES_TOTAL,
)

__all__ = [
    "CHANGE_EVENTS_TOTAL",
    "COUNTER_FETCH_LATENCY_SECONDS",
    "COUNTER_FETCH_TOTAL",
    "DEBOUNCE_FETCHES",
    "DEBOUNCE_TOTAL",
    "POLL_CYCLES_TOTAL",
    "ROW_DIFFS_TOTAL",
    "ROW_FETCH_FAILURES_TOTAL",
]
