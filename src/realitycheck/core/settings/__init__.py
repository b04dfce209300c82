"""User-tunable settings: field table, header grammar and persistent store."""
from __future__ import annotations

from .grammar import GrammarError, SettingsParseMiss, parse_document, parse_value
from .models import (
    DEFAULT_PRIORITY_WEIGHTS,
    FIELD_TABLE,
    SCAN_DEPTHS,
    ExclusionSettings,
    OutputSettings,
    Settings,
    SourceSettings,
)
from .store import SettingsStore, render_settings_document

__all__ = [
    "GrammarError",
    "SettingsParseMiss",
    "parse_document",
    "parse_value",
    "DEFAULT_PRIORITY_WEIGHTS",
    "FIELD_TABLE",
    "SCAN_DEPTHS",
    "ExclusionSettings",
    "OutputSettings",
    "Settings",
    "SourceSettings",
    "SettingsStore",
    "render_settings_document",
]
