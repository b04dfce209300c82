"""Project root and state directory resolution.

Resolution priority for the project root:
1. ``REALITYCHECK_PROJECT_ROOT`` environment variable
2. The nearest ancestor of the CWD holding a state directory or ``.git``
3. The CWD itself

The state directory name defaults to ``.reality-check`` and can be
overridden with ``REALITYCHECK_STATE_DIR``.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from realitycheck.core.exceptions import RealityCheckError

DEFAULT_STATE_DIR = ".reality-check"
STATE_FILE = "scan-state.json"
SETTINGS_FILE = "settings.local.md"
LOG_FILE = "realitycheck.log"


class ProjectRootError(RealityCheckError, RuntimeError):
    """Raised when an explicit project root override is invalid."""


def state_dir_name() -> str:
    return os.environ.get("REALITYCHECK_STATE_DIR") or DEFAULT_STATE_DIR


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """Resolve the project root directory."""
    env_root = os.environ.get("REALITYCHECK_PROJECT_ROOT")
    if env_root:
        path = Path(env_root).expanduser().resolve()
        if not path.is_dir():
            raise ProjectRootError(
                f"REALITYCHECK_PROJECT_ROOT points at missing directory: {path}"
            )
        return path

    cwd = Path(start or Path.cwd()).resolve()
    marker = state_dir_name()
    for candidate in (cwd, *cwd.parents):
        if (candidate / marker).is_dir() or (candidate / ".git").exists():
            return candidate
    return cwd


def get_state_dir(project_root: Path) -> Path:
    return Path(project_root) / state_dir_name()


def get_state_path(project_root: Path) -> Path:
    """Return the path of the persisted run state document."""
    return get_state_dir(project_root) / STATE_FILE


def get_settings_path(project_root: Path) -> Path:
    """Return the path of the persisted settings document."""
    return get_state_dir(project_root) / SETTINGS_FILE


def get_log_path(project_root: Path) -> Path:
    return get_state_dir(project_root) / LOG_FILE


__all__ = [
    "DEFAULT_STATE_DIR",
    "STATE_FILE",
    "SETTINGS_FILE",
    "ProjectRootError",
    "state_dir_name",
    "resolve_project_root",
    "get_state_dir",
    "get_state_path",
    "get_settings_path",
    "get_log_path",
]
