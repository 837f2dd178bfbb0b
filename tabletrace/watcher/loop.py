from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import List, Optional

from ..config import WatchConfig
from ..db.source import TableSource
from ..errors import ConnectionLostError, CounterFetchError
from ..interactive import Command, InputReader, parse_command, resolve_selection
from ..models import ChangeRecord, CounterSnapshot, TableId
from ..state import SessionState
from .changes import CycleResult, build_change_event, collect_cycle_changes
from .debounce import Debouncer
from .detector import has_counter_changes
from .history import ChangeHistory
from .metrics import observe_change_event, observe_poll_cycle
from .snapshot import RowSnapshotStore, take_snapshots

logger = logging.getLogger(__name__)


class Watcher:
    """
    Drives the poll -> detect -> debounce -> diff -> publish cycle.

    The row snapshots and the change history are owned by the watcher and only
    touched from the thread that calls run(). Interactive commands arrive
    through the InputReader queue and are handled on that same thread, once
    per cycle, before the poll.

    Usage:
        watcher = Watcher(source, display, config, all_tables, reader=reader)
        watcher.start(tables)
        watcher.run()  # returns after "quit"; fatal errors propagate
    """

    def __init__(
        self,
        source: TableSource,
        display,
        config: WatchConfig,
        all_tables: Sequence[TableId],
        state: Optional[SessionState] = None,
        reader: Optional[InputReader] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self.display = display
        self.config = config
        self.all_tables: List[TableId] = list(all_tables)
        self.state = state if state is not None else SessionState()
        self.reader = reader
        self.history = ChangeHistory(config.max_history)
        self.snapshots = RowSnapshotStore()
        self.watch_tables: List[TableId] = []
        self.previous: CounterSnapshot = {}
        self.debouncer = Debouncer(
            source.fetch_counters,
            interval_s=config.debounce_interval_s,
            max_iterations=config.debounce_max_iterations,
            sleep=sleep,
        )
        self._sleep = sleep
        self._clock = clock
        self._stopping = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stopping.is_set()

    def stop(self) -> None:
        self._stopping.set()

    def start(self, tables: Sequence[TableId]) -> None:
        """
        Take baseline row snapshots and counters for `tables`.

        Raises:
            CounterFetchError: If the baseline counters cannot be read
        """
        self.watch_tables = list(tables)
        self.snapshots.clear()
        take_snapshots(self.source, self.watch_tables, self.snapshots)
        self.previous = self.source.fetch_counters(self.watch_tables)

    def run(self) -> None:
        """
        Poll until stop() is called (the quit command).

        Raises:
            CounterFetchError: If counters cannot be read mid-session
            ConnectionLostError: If the connection keeper flagged the connection
        """
        if self.config.interactive:
            self.display.prompt(self.state.change_count)

        while not self._stopping.is_set():
            if self.config.interactive:
                self.process_input()
                if self._stopping.is_set():
                    break

            self._sleep(self.config.interval_s)
            self.run_cycle()

    def run_cycle(self) -> Optional[ChangeRecord]:
        """
        One polling iteration. Returns the published record, if any.
        """
        if self.state.connection_lost.is_set():
            raise ConnectionLostError("Connection to the database was lost")

        current = self.source.fetch_counters(self.watch_tables)

        if not has_counter_changes(current, self.previous):
            self.previous = current
            observe_poll_cycle("idle")
            return None

        settled = self.debouncer.settle(self.watch_tables, current)
        result = collect_cycle_changes(settled, self.previous, self.snapshots, self.source)
        self.previous = settled

        if not result.diffs:
            logger.debug("Counters moved but rows are unchanged for %s", result.tables)
            observe_poll_cycle("suspected")
            return None

        record = self._publish(result)
        observe_poll_cycle("published")
        return record

    def _publish(self, result: CycleResult) -> ChangeRecord:
        change = build_change_event(
            self.state.next_change_id(),
            result.tables,
            result.change_kinds,
            result.total_rows,
            timestamp=self._clock(),
        )
        record = ChangeRecord(change=change, diffs=result.diffs)

        if self.config.interactive:
            self.display.clear_prompt_line()
        self.display.change(change, self.config.interactive)
        if self.config.interactive:
            self.display.inline_diff(result.diffs)
            self.display.prompt(self.state.change_count)

        self.history.append(record)
        observe_change_event()
        return record

    def process_input(self) -> None:
        """Handle every line queued by the input reader since the last cycle."""
        if self.reader is None:
            return
        for line in self.reader.drain():
            self.handle_line(line)
            if self._stopping.is_set():
                return

    def handle_line(self, line: str) -> None:
        self.display.newline()

        if self.state.reselecting:
            self._handle_reselection(line)
            self.display.prompt(self.state.change_count)
            return

        command, change_id = parse_command(line)

        if command is Command.QUIT:
            self.display.goodbye()
            self.stop()
            return
        if command is Command.HELP:
            self.display.help()
        elif command is Command.LIST_HISTORY:
            self.display.history(self.history.records())
        elif command is Command.CLEAR_HISTORY:
            self.history.clear()
            self.state.reset_change_count()
            self.display.success("✓ History cleared.")
        elif command is Command.RESELECT:
            self.state.reselecting = True
            self.display.table_selection_prompt(self.all_tables)
        elif command is Command.SHOW_WATCHED:
            self.display.watching_tables(self.watch_tables, "👁 Watching")
        elif command is Command.DETAIL:
            record = self.history.find(change_id)
            if record is None:
                self.display.change_not_found(change_id)
            else:
                self.display.detail(record)
        elif command is Command.UNKNOWN:
            self.display.unknown_command(line.strip())

        self.display.prompt(self.state.change_count)

    def _handle_reselection(self, line: str) -> None:
        self.state.reselecting = False

        text = line.strip()
        if not text:
            self.display.warning("Selection cancelled. Continuing with current tables.")
            return

        rejected: List[str] = []
        tables = resolve_selection(text, self.all_tables, rejected)
        for token in rejected:
            self.display.warning(f"⚠ Invalid number: {token}")

        if not tables:
            self.display.warning("No valid tables selected. Continuing with current tables.")
            return

        self.reset_session(tables)
        self.display.watching_tables(self.watch_tables, "✓ Now watching")

    def reset_session(self, tables: Sequence[TableId]) -> None:
        """
        Start over on a new table set: empty history, ids restarted at 1,
        fresh baseline rows and counters.
        """
        self.history.clear()
        self.state.reset_change_ids()
        self.snapshots.clear()
        self.watch_tables = list(tables)
        take_snapshots(self.source, self.watch_tables, self.snapshots)
        try:
            self.previous = self.source.fetch_counters(self.watch_tables)
        except CounterFetchError as exc:
            # the next cycle re-raises if the database is really gone
            logger.warning("Could not refresh counters after reselection: %s", exc)
