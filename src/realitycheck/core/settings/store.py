"""Persistent settings store.

Settings live in ``<root>/.reality-check/settings.local.md``: a markdown
document whose header block follows :mod:`realitycheck.core.settings.grammar`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from realitycheck.core.exceptions import PersistenceError
from realitycheck.core.paths import get_settings_path, resolve_project_root
from realitycheck.core.utils.io import read_text, write_text
from realitycheck.data import read_text as read_data_text

from .grammar import SettingsParseMiss, format_header, parse_document
from .models import Settings

logger = logging.getLogger(__name__)


def render_settings_document(settings: Settings) -> str:
    """Render the full settings document; equal settings give equal bytes."""
    return format_header(settings.to_dict()) + read_data_text("templates", "settings-body.md")


class SettingsStore:
    """Load and persist :class:`Settings` for one project root."""

    def __init__(self, project_root: Optional[Path] = None, *, path: Optional[Path] = None) -> None:
        self.project_root = Path(project_root) if project_root is not None else resolve_project_root()
        self.path = Path(path) if path is not None else get_settings_path(self.project_root)
        self.last_misses: List[SettingsParseMiss] = []

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Settings:
        """Return fully populated settings (defaults when nothing is stored).

        Raises:
            PersistenceError: If the document exists but cannot be read.
        """
        self.last_misses = []
        if not self.path.exists():
            return Settings()

        try:
            content = read_text(self.path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading settings %s: %s", self.path, exc)
            raise PersistenceError(
                f"Cannot read settings: {exc}", context={"path": str(self.path)}
            ) from exc

        doc = parse_document(content)
        misses = list(doc.misses)
        if not doc.has_header:
            logger.warning("Settings %s has no header block; using defaults", self.path)
        settings = Settings.from_dict(doc.values, misses=misses)

        for miss in misses:
            logger.warning("Settings parse miss for %s; using default", miss.describe())
        self.last_misses = misses
        return settings

    def write(self, settings: Settings) -> Path:
        """Persist ``settings`` atomically.

        Raises:
            PersistenceError: If the document cannot be written.
        """
        content = render_settings_document(settings)
        try:
            write_text(self.path, content)
        except OSError as exc:
            logger.error("Error writing settings %s: %s", self.path, exc)
            raise PersistenceError(
                f"Cannot write settings: {exc}", context={"path": str(self.path)}
            ) from exc
        logger.debug("Wrote settings to %s", self.path)
        return self.path

    def update(self, changes: Mapping[str, Any]) -> Settings:
        """Apply a partial update (nested or dotted keys) and persist it.

        Raises:
            ValueError: If a change is unknown or has the wrong type.
        """
        updated = self.read().merged(changes)
        self.write(updated)
        logger.info("Updated settings: %s", ", ".join(sorted(changes)))
        return updated

    def reset(self) -> Settings:
        """Overwrite the stored settings with the defaults."""
        defaults = Settings()
        self.write(defaults)
        return defaults


__all__ = ["SettingsStore", "render_settings_document"]
