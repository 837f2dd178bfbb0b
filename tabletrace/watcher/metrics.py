from __future__ import annotations

import logging
from typing import Iterable

from ..metrics.registry import (
    CHANGE_EVENTS_TOTAL,
    DEBOUNCE_FETCHES,
    DEBOUNCE_TOTAL,
    POLL_CYCLES_TOTAL,
    ROW_DIFFS_TOTAL,
    ROW_FETCH_FAILURES_TOTAL,
)
from ..models import RowDiff

logger = logging.getLogger(__name__)


def observe_poll_cycle(outcome: str) -> None:
    try:
        POLL_CYCLES_TOTAL.labels(outcome=outcome).inc()
    except Exception:
        logger.debug("Failed to record poll cycle metric", exc_info=True)


def observe_debounce(outcome: str, fetches: int) -> None:
    try:
        DEBOUNCE_TOTAL.labels(outcome=outcome).inc()
        DEBOUNCE_FETCHES.observe(fetches)
    except Exception:
        logger.debug("Failed to record debounce metric", exc_info=True)


def observe_row_diffs(table: str, diffs: Iterable[RowDiff]) -> None:
    try:
        for diff in diffs:
            ROW_DIFFS_TOTAL.labels(table=table, kind=diff.kind.value).inc()
    except Exception:
        logger.debug("Failed to record row diff metric", exc_info=True)


def observe_row_fetch_failure(table: str) -> None:
    try:
        ROW_FETCH_FAILURES_TOTAL.labels(table=table).inc()
    except Exception:
        logger.debug("Failed to record row fetch failure metric", exc_info=True)


def observe_change_event() -> None:
    try:
        CHANGE_EVENTS_TOTAL.inc()
    except Exception:
        logger.debug("Failed to record change event metric", exc_info=True)
