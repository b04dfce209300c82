from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from realitycheck.core.utils.io import (
    LockTimeoutError,
    acquire_file_lock,
    atomic_write,
    read_json,
    read_text,
    update_json,
    write_json_atomic,
    write_text,
)


def test_write_json_atomic_roundtrip(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "data.json"
    payload = {"b": {"c": [1, 2, 3]}, "a": 1}
    write_json_atomic(out, payload)

    assert json.loads(out.read_text()) == payload
    # Indented, sorted, newline-terminated
    assert out.read_text().startswith('{\n  "a": 1')
    assert out.read_text().endswith("}\n")


def test_read_json_missing_uses_default(tmp_path: Path) -> None:
    assert read_json(tmp_path / "nope.json", default=None) is None
    with pytest.raises(FileNotFoundError):
        read_json(tmp_path / "nope.json")


def test_failed_write_leaves_previous_document_intact(tmp_path: Path) -> None:
    out = tmp_path / "doc.json"
    write_json_atomic(out, {"v": 1})

    with pytest.raises(TypeError):
        write_json_atomic(out, {"v": object()})

    assert json.loads(out.read_text()) == {"v": 1}
    leftovers = [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_atomic_write_error_in_writer_keeps_old_text(tmp_path: Path) -> None:
    out = tmp_path / "doc.txt"
    write_text(out, "old")

    def _boom(f):
        f.write("partial")
        raise RuntimeError("disk full")

    with pytest.raises(RuntimeError):
        atomic_write(out, _boom)
    assert read_text(out) == "old"


def test_update_json_missing_file_skips_write(tmp_path: Path) -> None:
    out = tmp_path / "state.json"
    seen = []

    def _fn(current):
        seen.append(current)
        return None

    assert update_json(out, _fn) is None
    assert seen == [None]
    assert not out.exists()


def test_concurrent_update_json_loses_no_updates(tmp_path: Path) -> None:
    out = tmp_path / "counter.json"
    write_json_atomic(out, {"items": []})

    def worker(n: int) -> None:
        for i in range(20):
            update_json(out, lambda doc: {"items": doc["items"] + [f"{n}-{i}"]})

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    items = read_json(out)["items"]
    assert len(items) == 80
    assert len(set(items)) == 80


def test_lock_timeout_when_held(tmp_path: Path) -> None:
    target = tmp_path / "locked.json"
    acquired = threading.Event()
    release = threading.Event()
    errors = []

    def holder() -> None:
        with acquire_file_lock(target, timeout=2):
            acquired.set()
            release.wait(2)

    t = threading.Thread(target=holder)
    t.start()
    acquired.wait(2)
    try:
        with acquire_file_lock(target, timeout=0.1):
            pass
    except LockTimeoutError as exc:
        errors.append(exc)
    finally:
        release.set()
        t.join()

    assert len(errors) == 1
    # Released lock can be taken again
    with acquire_file_lock(target, timeout=1):
        pass


def test_lock_rejects_non_positive_timeout(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        with acquire_file_lock(tmp_path / "x.json", timeout=0):
            pass
