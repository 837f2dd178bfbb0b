from __future__ import annotations

import logging
import queue
import sys
import threading
from collections.abc import Callable, Sequence
from enum import Enum
from typing import IO, List, Optional, Tuple

from .config import INPUT_QUEUE_SIZE
from .models import TableId

logger = logging.getLogger(__name__)


class Command(str, Enum):
    NONE = "none"
    QUIT = "quit"
    HELP = "help"
    LIST_HISTORY = "list"
    CLEAR_HISTORY = "clear"
    RESELECT = "reselect"
    SHOW_WATCHED = "watching"
    DETAIL = "detail"
    UNKNOWN = "unknown"


_ALIASES = {
    "q": Command.QUIT,
    "quit": Command.QUIT,
    "exit": Command.QUIT,
    "h": Command.HELP,
    "help": Command.HELP,
    "l": Command.LIST_HISTORY,
    "list": Command.LIST_HISTORY,
    "c": Command.CLEAR_HISTORY,
    "clear": Command.CLEAR_HISTORY,
    "r": Command.RESELECT,
    "reset": Command.RESELECT,
    "reselect": Command.RESELECT,
    "w": Command.SHOW_WATCHED,
    "watching": Command.SHOW_WATCHED,
}


def parse_command(line: str) -> Tuple[Command, Optional[int]]:
    """
    Map one input line to a command.

    A bare number is a request for the details of that change id and is
    returned alongside Command.DETAIL.
    """
    text = line.strip()
    if not text:
        return Command.NONE, None
    if text in _ALIASES:
        return _ALIASES[text], None
    if text.isdecimal():
        return Command.DETAIL, int(text)
    return Command.UNKNOWN, None


def _parse_int(text: str) -> Optional[int]:
    text = text.strip()
    if not text.isdecimal():
        return None
    return int(text)


def parse_selection(
    text: str,
    count: int,
    rejected: Optional[List[str]] = None,
) -> List[int]:
    """
    Parse a table selection such as "1,3,5", "1-3" or "1,4-6,9".

    Numbers are 1-based positions in a list of `count` items; the result holds
    0-based indices in first-seen order without duplicates. Ranges are clamped
    to 1..count. Single numbers outside that span are dropped and appended to
    `rejected` when given; malformed tokens are skipped.
    """
    indices: List[int] = []

    def add(index: int) -> None:
        if index not in indices:
            indices.append(index)

    for part in text.split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                continue
            start, end = _parse_int(bounds[0]), _parse_int(bounds[1])
            if start is None or end is None:
                continue
            for number in range(max(start, 1), min(end, count) + 1):
                add(number - 1)
            continue

        number = _parse_int(part)
        if number is None:
            continue
        if 0 < number <= count:
            add(number - 1)
        elif rejected is not None:
            rejected.append(part)

    return indices


def resolve_selection(
    text: str,
    all_tables: Sequence[TableId],
    rejected: Optional[List[str]] = None,
) -> List[TableId]:
    """Tables named by a selection expression; "all" selects every table."""
    text = text.strip()
    if text.lower() == "all":
        return list(all_tables)
    return [all_tables[i] for i in parse_selection(text, len(all_tables), rejected)]


def select_tables_interactively(
    all_tables: Sequence[TableId],
    display,
    read_line: Optional[Callable[[], str]] = None,
) -> List[TableId]:
    """
    Startup table picker. Blocks on a single line of input.

    Returns an empty list when the user enters nothing.
    """
    display.table_selection_prompt(all_tables, startup=True)
    line = (read_line or sys.stdin.readline)()
    if not line.strip():
        return []

    rejected: List[str] = []
    selected = resolve_selection(line, all_tables, rejected)
    for token in rejected:
        display.warning(f"⚠ Invalid number: {token}")
    return selected


class InputReader:
    """
    Background line reader feeding a bounded queue.

    A full queue blocks the reader until the watch loop drains it; lines are
    never dropped. The thread ends at EOF or after stop().

    Usage:
        reader = InputReader()
        reader.start()
        for line in reader.drain():
            ...
    """

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        maxsize: int = INPUT_QUEUE_SIZE,
    ) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self.queue: "queue.Queue[str]" = queue.Queue(maxsize=maxsize)
        self._stopping = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="tabletrace-input", daemon=True
        )
        self.eof = threading.Event()

    def start(self) -> "InputReader":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopping.set()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stopping.is_set():
            line = self._stream.readline()
            if not line:
                logger.debug("Input stream closed")
                self.eof.set()
                return
            self._put(line.rstrip("\r\n"))

    def _put(self, line: str) -> None:
        # re-check the stop flag while blocked on a full queue
        while not self._stopping.is_set():
            try:
                self.queue.put(line, timeout=0.5)
                return
            except queue.Full:
                continue

    def drain(self) -> List[str]:
        """All lines read so far, without blocking."""
        lines: List[str] = []
        while True:
            try:
                lines.append(self.queue.get_nowait())
            except queue.Empty:
                return lines
