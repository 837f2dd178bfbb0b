from __future__ import annotations

from datetime import datetime

import pytest

from tabletrace.models import ChangeEvent, ChangeRecord
from tabletrace.watcher.history import ChangeHistory


def _record(change_id: int) -> ChangeRecord:
    change = ChangeEvent(
        id=change_id,
        timestamp=datetime(2024, 1, 1, 12, 0, 0),
        table="public.users",
        change_type="INSERT",
        row_count=1,
    )
    return ChangeRecord(change=change)


class TestChangeHistory:
    def test_append_and_find(self) -> None:
        history = ChangeHistory()
        history.append(_record(1))
        history.append(_record(2))

        assert len(history) == 2
        assert history.find(2).change.id == 2
        assert history.find(3) is None

    def test_oldest_record_is_evicted_at_capacity(self) -> None:
        history = ChangeHistory(max_size=100)
        for change_id in range(1, 102):
            history.append(_record(change_id))

        assert len(history) == 100
        assert history.find(1) is None
        assert history.records()[0].change.id == 2
        assert history.records()[-1].change.id == 101

    def test_clear(self) -> None:
        history = ChangeHistory()
        history.append(_record(1))
        history.clear()

        assert len(history) == 0
        assert history.records() == []

    def test_records_is_a_copy(self) -> None:
        history = ChangeHistory()
        history.append(_record(1))
        history.records().clear()
        assert len(history) == 1

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            ChangeHistory(max_size=0)
