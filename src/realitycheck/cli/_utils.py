"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Tuple

from realitycheck.core.paths import resolve_project_root
from realitycheck.core.settings import SettingsStore
from realitycheck.core.state import StateStore


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get the project root from ``--repo-root`` or auto-detect it."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return resolve_project_root()


def open_stores(args: argparse.Namespace) -> Tuple[SettingsStore, StateStore]:
    """Return the settings and state stores for the selected project root."""
    root = get_repo_root(args)
    return SettingsStore(root), StateStore(root)


__all__ = ["get_repo_root", "open_stores"]
