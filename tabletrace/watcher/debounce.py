from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from ..config import DEBOUNCE_INTERVAL_MS, DEBOUNCE_MAX_ITERATIONS
from ..errors import CounterFetchError
from ..models import CounterSnapshot, TableId
from .detector import has_counter_changes
from .metrics import observe_debounce

logger = logging.getLogger(__name__)

FetchCounters = Callable[[Sequence[TableId]], CounterSnapshot]


class Debouncer:
    """
    Re-polls activity counters until they stop moving.

    Counters observed while a transaction is still committing lead to partial
    diffs, so once a change is suspected the counters are fetched again at a
    short interval until two consecutive fetches agree. The number of fetches
    is capped: under continuous writes the last fetch is returned as-is
    (best-effort settle, not guaranteed quiescence).

    Usage:
        debouncer = Debouncer(source.fetch_counters)
        settled = debouncer.settle(tables, current)
    """

    def __init__(
        self,
        fetch_counters: FetchCounters,
        interval_s: float = DEBOUNCE_INTERVAL_MS / 1000.0,
        max_iterations: int = DEBOUNCE_MAX_ITERATIONS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be > 0")
        self._fetch = fetch_counters
        self.interval_s = interval_s
        self.max_iterations = max_iterations
        self._sleep = sleep

    def settle(
        self,
        tables: Sequence[TableId],
        initial: CounterSnapshot,
    ) -> CounterSnapshot:
        """
        Return a settled counter snapshot.

        Each fetch is compared with the one immediately before it (the first
        with `initial`). A failed fetch ends the run and the last successful
        snapshot is returned.
        """
        last = initial
        fetches = 0

        for _ in range(self.max_iterations):
            self._sleep(self.interval_s)
            try:
                current = self._fetch(tables)
            except CounterFetchError as exc:
                logger.warning("Counter fetch failed while debouncing: %s", exc)
                observe_debounce("failed", fetches)
                return last
            fetches += 1

            if not has_counter_changes(current, last):
                logger.debug("Counters settled after %d fetch(es)", fetches)
                observe_debounce("settled", fetches)
                return current
            last = current

        logger.debug("Counters still moving after %d fetches; using last", fetches)
        observe_debounce("exhausted", fetches)
        return last
