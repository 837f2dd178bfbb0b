from __future__ import annotations

from tabletrace.state import SessionState


class TestSessionState:
    def test_ids_start_at_one(self) -> None:
        state = SessionState()
        assert [state.next_change_id() for _ in range(3)] == [1, 2, 3]
        assert state.change_count == 3

    def test_resetting_the_count_keeps_ids_increasing(self) -> None:
        state = SessionState()
        state.next_change_id()
        state.next_change_id()

        state.reset_change_count()

        assert state.change_count == 0
        assert state.next_change_id() == 3
        assert state.change_count == 1

    def test_resetting_ids_restarts_both(self) -> None:
        state = SessionState()
        state.next_change_id()

        state.reset_change_ids()

        assert state.change_count == 0
        assert state.next_change_id() == 1

    def test_reselecting_flag(self) -> None:
        state = SessionState()
        assert not state.reselecting
        state.reselecting = True
        assert state.reselecting
