"""Atomic, locked file access for the persisted Reality Check documents."""
from __future__ import annotations

from .core import PathLike, atomic_write, ensure_directory, read_text, write_text
from .json import read_json, update_json, write_json_atomic
from .locking import LockTimeoutError, acquire_file_lock, is_locked, remove_lock_file

__all__ = [
    "LockTimeoutError",
    "PathLike",
    "acquire_file_lock",
    "atomic_write",
    "ensure_directory",
    "is_locked",
    "read_json",
    "read_text",
    "remove_lock_file",
    "update_json",
    "write_json_atomic",
    "write_text",
]
