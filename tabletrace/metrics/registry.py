from __future__ import annotations

from prometheus_client import Counter, Histogram

POLL_CYCLES_TOTAL = Counter(
    "tabletrace_poll_cycles_total",
    "Polling cycles completed by the watch loop",
    ["outcome"],  # idle | suspected | published
)

COUNTER_FETCH_TOTAL = Counter(
    "tabletrace_counter_fetch_total",
    "Table activity counter fetches",
    ["status"],
)

COUNTER_FETCH_LATENCY_SECONDS = Histogram(
    "tabletrace_counter_fetch_latency_seconds",
    "Latency of a table activity counter fetch",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

DEBOUNCE_TOTAL = Counter(
    "tabletrace_debounce_total",
    "Debounce runs by outcome",
    ["outcome"],  # settled | exhausted | failed
)

DEBOUNCE_FETCHES = Histogram(
    "tabletrace_debounce_fetches",
    "Counter fetches performed by a single debounce run",
    buckets=(1, 2, 3, 4, 5, 8, 13),
)

ROW_DIFFS_TOTAL = Counter(
    "tabletrace_row_diffs_total",
    "Row diffs produced per table and kind",
    ["table", "kind"],
)

ROW_FETCH_FAILURES_TOTAL = Counter(
    "tabletrace_row_fetch_failures_total",
    "Row fetches that failed and degraded to an empty row set",
    ["table"],
)

CHANGE_EVENTS_TOTAL = Counter(
    "tabletrace_change_events_total",
    "Change events published to the display",
)
