from __future__ import annotations

import logging

import pytest

from realitycheck.core.settings import Settings, SettingsStore
from realitycheck.core.settings.models import DEFAULT_PRIORITY_WEIGHTS

DEFAULTS = {
    "sources": {
        "github_issues": True,
        "linear": False,
        "docs_paths": ["docs/", "README.md", "CLAUDE.md", "PLAN.md"],
        "code_exploration": True,
    },
    "scan_depth": "thorough",
    "output": {
        "write_to_file": True,
        "file_path": "reality-check-report.md",
        "display_summary": True,
    },
    "priority_weights": {"security": 10, "bugs": 8, "features": 5, "docs": 3},
    "exclusions": {
        "paths": ["node_modules/", "dist/", ".git/"],
        "labels": ["wontfix", "duplicate"],
    },
}


def test_read_missing_store_returns_defaults(settings_store: SettingsStore) -> None:
    assert not settings_store.exists()
    settings = settings_store.read()
    assert settings == Settings()
    assert settings.to_dict() == DEFAULTS
    assert settings_store.last_misses == []


def test_write_read_round_trip(settings_store: SettingsStore) -> None:
    custom = Settings.from_dict(
        {
            "sources": {"github_issues": False, "linear": True, "docs_paths": ["handbook/"]},
            "scan_depth": "quick",
            "output": {"write_to_file": False, "file_path": "reports/rc.md"},
            "priority_weights": {"security": 12, "testing": 4.5},
            "exclusions": {"paths": [], "labels": ["invalid", "question"]},
        }
    )
    settings_store.write(custom)
    loaded = settings_store.read()

    assert loaded == custom
    assert loaded.priority_weights["testing"] == 4.5
    assert loaded.priority_weights["bugs"] == DEFAULT_PRIORITY_WEIGHTS["bugs"]
    assert settings_store.last_misses == []


def test_write_is_byte_identical(settings_store: SettingsStore) -> None:
    settings = Settings.from_dict({"scan_depth": "medium"})
    settings_store.write(settings)
    first = settings_store.path.read_bytes()
    settings_store.write(settings_store.read())
    assert settings_store.path.read_bytes() == first


def test_out_of_grammar_lines_fall_back_to_defaults(settings_store: SettingsStore, caplog) -> None:
    settings_store.path.parent.mkdir(parents=True, exist_ok=True)
    settings_store.path.write_text(
        "---\n"
        "scan_depth: extreme\n"
        "output:\n"
        "  write_to_file: maybe\n"
        "  file_path: custom.md\n"
        "priority_weights:\n"
        "  security: high\n"
        "    nested: 1\n"
        "unknown_key: 1\n"
        "---\n"
        "Body\n",
        encoding="utf-8",
    )
    with caplog.at_level(logging.WARNING, logger="realitycheck.core.settings.store"):
        settings = settings_store.read()

    assert settings.scan_depth == "thorough"
    assert settings.output.write_to_file is True
    assert settings.output.file_path == "custom.md"
    assert settings.priority_weights["security"] == 10
    missed = {m.key for m in settings_store.last_misses}
    assert {"scan_depth", "output.write_to_file", "priority_weights.security", "unknown_key"} <= missed
    assert "Settings parse miss" in caplog.text


def test_document_without_header_uses_defaults(settings_store: SettingsStore) -> None:
    settings_store.path.parent.mkdir(parents=True, exist_ok=True)
    settings_store.path.write_text("# Notes only\n", encoding="utf-8")
    assert settings_store.read() == Settings()


def test_update_merges_dotted_and_nested_keys(settings_store: SettingsStore) -> None:
    settings_store.update({"output.file_path": "x.md", "sources": {"linear": True}})
    settings = settings_store.read()
    assert settings.output.file_path == "x.md"
    assert settings.sources.linear is True
    assert settings.sources.github_issues is True


@pytest.mark.parametrize(
    "changes",
    [
        {"scan_depth": "deep"},
        {"output.write_to_file": "yes"},
        {"nope": 1},
        {"a.b.c": 1},
    ],
)
def test_update_rejects_invalid_changes(settings_store: SettingsStore, changes) -> None:
    with pytest.raises(ValueError):
        settings_store.update(changes)
    assert not settings_store.exists()


def test_reset_restores_defaults(settings_store: SettingsStore) -> None:
    settings_store.update({"scan_depth": "quick"})
    assert settings_store.reset() == Settings()
    assert settings_store.read().scan_depth == "thorough"
