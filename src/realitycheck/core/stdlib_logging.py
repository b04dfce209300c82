from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from realitycheck.core.utils.io import ensure_directory

_CONFIGURED_LOG_PATH: str | None = None
_FILE_HANDLER: logging.Handler | None = None
_STDERR_HANDLER: logging.Handler | None = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def default_level() -> str:
    return os.environ.get("REALITYCHECK_LOG_LEVEL", "INFO")


def configure_logging(*, log_path: Path, level: str | None = None, verbose: bool = False) -> None:
    """Configure stdlib logging to write to ``log_path``.

    With ``verbose`` a stderr handler is installed as well. Idempotent per
    process: calling again with the same path only adjusts levels.
    """
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _STDERR_HANDLER

    lvl = _level_from_name(level or default_level())
    root = logging.getLogger()
    root.setLevel(lvl)

    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH != resolved or _FILE_HANDLER is None:
        ensure_directory(Path(resolved).parent)
        if _FILE_HANDLER is not None:
            root.removeHandler(_FILE_HANDLER)
            _FILE_HANDLER.close()
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)
        _FILE_HANDLER = fh
        _CONFIGURED_LOG_PATH = resolved
    _FILE_HANDLER.setLevel(lvl)

    if verbose and _STDERR_HANDLER is None:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(sh)
        _STDERR_HANDLER = sh
    if _STDERR_HANDLER is not None:
        _STDERR_HANDLER.setLevel(lvl)


def reset_logging_for_tests() -> None:
    """Test-only: remove the handlers installed by :func:`configure_logging`."""
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _STDERR_HANDLER
    root = logging.getLogger()
    for h in (_FILE_HANDLER, _STDERR_HANDLER):
        if h is not None:
            root.removeHandler(h)
            h.close()
    _CONFIGURED_LOG_PATH = None
    _FILE_HANDLER = None
    _STDERR_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests", "default_level", "LOG_FORMAT"]
