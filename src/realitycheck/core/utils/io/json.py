"""JSON documents on disk: shared-lock reads, locked atomic writes.

Documents are written indented and with sorted keys so a state file diffs
cleanly between runs.
"""
from __future__ import annotations

import fcntl
import json
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .core import PathLike, Writer, atomic_write
from .locking import acquire_file_lock

JSON_INDENT = 2
ENCODING = "utf-8"

Document = Dict[str, Any]

_MISSING = object()


def _serializer(data: Any) -> Writer:
    def _write(handle) -> None:
        json.dump(data, handle, indent=JSON_INDENT, sort_keys=True, ensure_ascii=False)
        handle.write("\n")

    return _write


def read_json(file_path: PathLike, *, default: Any = _MISSING) -> Any:
    """Load the JSON document at ``file_path`` under a shared ``flock``.

    Returns ``default`` when the file is missing and a default was given.

    Raises:
        FileNotFoundError: If the file is missing and no default was given.
        json.JSONDecodeError: If the content is not valid JSON.
    """
    path = Path(file_path)
    try:
        handle = open(path, "r", encoding=ENCODING)
    except FileNotFoundError:
        if default is _MISSING:
            raise
        return default
    with handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
        try:
            return json.load(handle)
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def write_json_atomic(
    file_path: PathLike,
    data: Any,
    *,
    acquire_lock: bool = True,
    lock_timeout: Optional[float] = None,
) -> None:
    """Replace the document at ``file_path`` with ``data``.

    With ``acquire_lock`` the write waits for the sidecar lock, so it cannot
    interleave with an :func:`update_json` cycle.
    """
    path = Path(file_path)
    lock = acquire_file_lock(path, timeout=lock_timeout) if acquire_lock else nullcontext()
    atomic_write(path, _serializer(data), lock_cm=lock, encoding=ENCODING)


def update_json(
    file_path: PathLike,
    update_fn: Callable[[Optional[Document]], Optional[Document]],
    *,
    lock_timeout: Optional[float] = None,
) -> Optional[Document]:
    """Run one read-modify-write cycle under the exclusive sidecar lock.

    ``update_fn`` gets the current document, or None when the file does not
    exist, and returns the document to store. Returning None writes nothing.

    Raises:
        ValueError: If the stored document is not a JSON object.
    """
    path = Path(file_path)
    with acquire_file_lock(path, timeout=lock_timeout):
        current = read_json(path, default=None)
        if current is not None and not isinstance(current, dict):
            raise ValueError(f"Expected a JSON object in {path}, got {type(current).__name__}")
        updated = update_fn(current)
        if updated is not None:
            atomic_write(path, _serializer(updated), encoding=ENCODING)
        return updated


__all__ = ["JSON_INDENT", "read_json", "update_json", "write_json_atomic"]
