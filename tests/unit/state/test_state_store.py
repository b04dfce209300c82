from __future__ import annotations

import json
import re
import threading

import pytest

from realitycheck.core.exceptions import (
    PersistenceError,
    UnknownCategoryError,
    UnknownProducerError,
)
from realitycheck.core.settings import Settings
from realitycheck.core.state import FINDING_CATEGORIES, PRODUCER_IDS, StateStore


def test_read_without_run_is_none(state_store: StateStore) -> None:
    assert state_store.read() is None


def test_create_initial_state(state_store: StateStore) -> None:
    settings = Settings.from_dict({"scan_depth": "quick"})
    state = state_store.create(settings)

    assert re.match(r"^scan-20260301-120000-[0-9a-f]{8}$", state.id)
    assert state.scan.status == "pending"
    assert state.phases.current == "settings-check"
    assert state.phases.history == []
    assert state.producers == {pid: None for pid in PRODUCER_IDS}
    assert state.findings == {cat: [] for cat in FINDING_CATEGORIES}
    assert state.report is None
    assert state.settings["scan_depth"] == "quick"

    on_disk = json.loads(state_store.path.read_text())
    assert on_disk["version"] == "1.0.0"
    assert on_disk["scan"]["startedAt"] == "2026-03-01T12:00:00.000Z"


def test_create_replaces_previous_run(state_store: StateStore) -> None:
    first = state_store.create()
    state_store.append_findings("issues", [{"title": "old"}])
    second = state_store.create()

    assert first.id != second.id
    assert state_store.read().findings["issues"] == []


def test_mutations_without_run_return_none(state_store: StateStore) -> None:
    assert state_store.start_phase("parallel-scan") is None
    assert state_store.complete_phase() is None
    assert state_store.record_producer_result("issueScanner", {"x": 1}) is None
    assert state_store.append_findings("drift", [1]) is None
    assert state_store.set_report({"summary": {}}) is None
    assert not state_store.path.exists()


def test_record_producer_result(state_store: StateStore) -> None:
    state_store.create()
    state = state_store.record_producer_result("docAnalyzer", {"documentedFeatures": ["auth"]})

    entry = state.producers["docAnalyzer"]
    assert entry.status == "completed"
    assert entry.completed_at == "2026-03-01T12:00:00.000Z"
    assert state.producer_payload("docAnalyzer") == {"documentedFeatures": ["auth"]}
    assert state.producers["issueScanner"] is None


def test_record_unknown_producer_is_rejected(state_store: StateStore) -> None:
    state_store.create()
    with pytest.raises(UnknownProducerError):
        state_store.record_producer_result("linearScanner", {})


def test_append_findings_preserves_order(state_store: StateStore) -> None:
    state_store.create()
    state_store.append_findings("gaps", [{"n": 1}, {"n": 2}])
    state = state_store.append_findings("gaps", [{"n": 3}])
    assert state.findings["gaps"] == [{"n": 1}, {"n": 2}, {"n": 3}]


def test_append_unknown_category_is_rejected_before_io(state_store: StateStore) -> None:
    with pytest.raises(UnknownCategoryError):
        state_store.append_findings("ideas", [1])
    assert not state_store.path.exists()


def test_concurrent_producer_writes_lose_nothing(state_store: StateStore) -> None:
    state_store.create()

    def producer(pid: str) -> None:
        state_store.record_producer_result(pid, {"from": pid})
        for i in range(10):
            state_store.append_findings("issues", [f"{pid}-{i}"])

    threads = [threading.Thread(target=producer, args=(pid,)) for pid in PRODUCER_IDS]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = state_store.read()
    for pid in PRODUCER_IDS:
        assert state.producer_payload(pid) == {"from": pid}
    assert len(state.findings["issues"]) == 30
    for pid in PRODUCER_IDS:
        mine = [f for f in state.findings["issues"] if f.startswith(pid)]
        assert mine == [f"{pid}-{i}" for i in range(10)]


def test_failed_write_keeps_previous_document(state_store: StateStore) -> None:
    state = state_store.create()
    before = state_store.path.read_text()

    state.report = {"bad": object()}
    with pytest.raises(PersistenceError):
        state_store.write(state)

    assert state_store.path.read_text() == before


def test_invalid_document_raises_persistence_error(state_store: StateStore) -> None:
    state_store.path.parent.mkdir(parents=True, exist_ok=True)
    state_store.path.write_text('{"version": "1.0.0"}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        state_store.read()

    state_store.path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        state_store.read()


def test_delete_removes_run(state_store: StateStore) -> None:
    state_store.create()
    assert state_store.delete() is True
    assert state_store.read() is None
    # Absent document counts as success
    assert state_store.delete() is True


def test_set_report(state_store: StateStore) -> None:
    state_store.create()
    state = state_store.set_report({"summary": {"driftCount": 0}, "markdown": "# R"})
    assert state.report["markdown"] == "# R"
