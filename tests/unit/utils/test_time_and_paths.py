from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from realitycheck.core.paths import (
    ProjectRootError,
    get_settings_path,
    get_state_path,
    resolve_project_root,
)
from realitycheck.core.utils.time import format_timestamp, parse_iso8601, try_parse_iso8601


def test_format_timestamp_is_millisecond_utc() -> None:
    dt = datetime(2026, 1, 31, 9, 15, 2, 123456, tzinfo=timezone.utc)
    assert format_timestamp(dt) == "2026-01-31T09:15:02.123Z"


def test_parse_iso8601_accepts_z_and_date_only() -> None:
    assert parse_iso8601("2026-01-31T09:15:02.123Z").tzinfo is not None
    assert parse_iso8601("2026-03-01") == datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_try_parse_iso8601_returns_none_for_garbage() -> None:
    assert try_parse_iso8601("not a date") is None
    assert try_parse_iso8601(None) is None
    assert try_parse_iso8601(42) is None


def test_resolve_project_root_prefers_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("REALITYCHECK_PROJECT_ROOT", str(tmp_path))
    assert resolve_project_root() == tmp_path.resolve()


def test_resolve_project_root_rejects_missing_env_dir(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("REALITYCHECK_PROJECT_ROOT", str(tmp_path / "missing"))
    with pytest.raises(ProjectRootError):
        resolve_project_root()


def test_resolve_project_root_walks_up_to_git(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert resolve_project_root(nested) == tmp_path.resolve()


def test_state_dir_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("REALITYCHECK_STATE_DIR", ".rc")
    assert get_state_path(tmp_path) == tmp_path / ".rc" / "scan-state.json"
    assert get_settings_path(tmp_path) == tmp_path / ".rc" / "settings.local.md"
