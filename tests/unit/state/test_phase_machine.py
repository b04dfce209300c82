from __future__ import annotations

import pytest

from realitycheck.core.exceptions import InvalidPhaseError
from realitycheck.core.state import PHASES, StateStore
from realitycheck.core.state.phases import ensure_forward, next_phase


def test_next_phase_stays_on_terminal() -> None:
    assert next_phase("settings-check") == "parallel-scan"
    assert next_phase("complete") == "complete"


def test_ensure_forward_rejects_backward_transition() -> None:
    ensure_forward("synthesis", "synthesis")
    ensure_forward("synthesis", "complete")
    with pytest.raises(InvalidPhaseError, match="not allowed"):
        ensure_forward("synthesis", "parallel-scan")


@pytest.mark.parametrize("n", range(0, 8))
def test_complete_phase_progression(state_store: StateStore, n: int) -> None:
    state_store.create()
    for i in range(n):
        state_store.complete_phase({"step": i})

    state = state_store.read()
    assert state.phases.current == PHASES[min(n, len(PHASES) - 1)]
    history = state.phases.history
    assert len(history) == n
    assert [entry.result for entry in history] == [{"step": i} for i in range(n)]
    assert all(entry.status == "completed" for entry in history)


def test_complete_phase_marks_trailing_entry(state_store: StateStore) -> None:
    state_store.create()
    state_store.start_phase("settings-check")
    state = state_store.complete_phase({"ok": True})

    assert len(state.phases.history) == 1
    entry = state.phases.history[0]
    assert entry.phase == "settings-check"
    assert entry.status == "completed"
    assert entry.completed_at is not None
    assert state.phases.current == "parallel-scan"
    assert state.scan.status == "in_progress"


def test_reaching_terminal_phase_completes_run(state_store: StateStore) -> None:
    state_store.create()
    state_store.start_phase("report-generation")
    state = state_store.complete_phase()

    assert state.phases.current == "complete"
    assert state.scan.status == "completed"
    assert state.scan.completed_at is not None


def test_start_unknown_phase_leaves_state_unchanged(state_store: StateStore) -> None:
    state_store.create()
    before = state_store.path.read_bytes()

    with pytest.raises(InvalidPhaseError) as exc_info:
        state_store.start_phase("deploy")

    assert exc_info.value.context["phase"] == "deploy"
    assert state_store.path.read_bytes() == before


def test_start_backward_phase_leaves_state_unchanged(state_store: StateStore) -> None:
    state_store.create()
    state_store.start_phase("synthesis")
    before = state_store.path.read_bytes()

    with pytest.raises(InvalidPhaseError):
        state_store.start_phase("parallel-scan")

    assert state_store.path.read_bytes() == before


def test_jump_to_terminal_phase_is_allowed(state_store: StateStore) -> None:
    state_store.create()
    state = state_store.start_phase("complete")
    assert state.phases.current == "complete"
    assert state.phases.history[-1].status == "in_progress"
