from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List, Optional

from ..config import MAX_HISTORY_SIZE
from ..models import ChangeRecord


class ChangeHistory:
    """
    Most recent change records, oldest evicted first once max_size is reached.
    """

    def __init__(self, max_size: int = MAX_HISTORY_SIZE) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        self.max_size = max_size
        self._records: Deque[ChangeRecord] = deque(maxlen=max_size)

    def append(self, record: ChangeRecord) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records.clear()

    def find(self, change_id: int) -> Optional[ChangeRecord]:
        for record in self._records:
            if record.change.id == change_id:
                return record
        return None

    def records(self) -> List[ChangeRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
