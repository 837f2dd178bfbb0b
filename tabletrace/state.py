from __future__ import annotations

import threading


class SessionState:
    """
    Flags and counters shared between the watch loop, the connection keeper
    and the input reader.

    One instance per watch session, passed to every task that needs it.
    """

    def __init__(self) -> None:
        self.connection_lost = threading.Event()
        self._lock = threading.Lock()
        self._reselecting = False
        self._change_count = 0
        self._last_change_id = 0

    @property
    def reselecting(self) -> bool:
        with self._lock:
            return self._reselecting

    @reselecting.setter
    def reselecting(self, value: bool) -> None:
        with self._lock:
            self._reselecting = value

    @property
    def change_count(self) -> int:
        with self._lock:
            return self._change_count

    def next_change_id(self) -> int:
        """
        Allocate the next change event id and count it toward the prompt.

        Ids start at 1 and keep increasing until reset_change_ids().
        """
        with self._lock:
            self._last_change_id += 1
            self._change_count += 1
            return self._last_change_id

    def reset_change_count(self) -> None:
        """Zero the prompt count only; ids keep increasing."""
        with self._lock:
            self._change_count = 0

    def reset_change_ids(self) -> None:
        """Restart ids at 1 and zero the prompt count (new table selection)."""
        with self._lock:
            self._last_change_id = 0
            self._change_count = 0
