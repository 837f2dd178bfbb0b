from __future__ import annotations

import logging

from ..metrics.registry import COUNTER_FETCH_LATENCY_SECONDS, COUNTER_FETCH_TOTAL

logger = logging.getLogger(__name__)


def observe_counter_fetch(status: str, latency_s: float) -> None:
    """
    Record one activity counter fetch.

    Args:
        status: "success" or "error"
        latency_s: Wall time spent in the fetch, in seconds
    """
    try:
        COUNTER_FETCH_TOTAL.labels(status=status).inc()
        COUNTER_FETCH_LATENCY_SECONDS.observe(latency_s)
    except Exception:
        logger.debug("Failed to record counter fetch metric", exc_info=True)
