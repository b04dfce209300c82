"""Single-writer locking for persisted documents.

A document ``foo.json`` is guarded by ``foo.json.lock``. Holding the lock
means holding both a per-path ``threading.Lock`` (producers run as threads
of one process) and an exclusive ``flock`` on the sidecar (separate
processes, e.g. two CLI invocations).
"""
from __future__ import annotations

import fcntl
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, TextIO

from .core import PathLike, ensure_directory

DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.05
LOCK_SUFFIX = ".lock"

_mutexes: Dict[str, threading.Lock] = {}
_mutexes_guard = threading.Lock()


class LockTimeoutError(TimeoutError):
    """The lock of a document could not be taken in time."""


def lock_path_for(target: PathLike) -> Path:
    target = Path(target)
    return target.with_name(target.name + LOCK_SUFFIX)


def _mutex_for(lock_path: Path) -> threading.Lock:
    key = str(lock_path.resolve())
    with _mutexes_guard:
        return _mutexes.setdefault(key, threading.Lock())


def _try_flock(handle: TextIO) -> bool:
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        return False
    return True


@contextmanager
def acquire_file_lock(
    file_path: PathLike,
    timeout: Optional[float] = None,
    *,
    poll_interval: Optional[float] = None,
) -> Iterator[TextIO]:
    """Hold the exclusive lock of ``file_path`` for the duration of the block.

    Raises:
        ValueError: If ``timeout`` or ``poll_interval`` is not positive.
        LockTimeoutError: If the lock is still held elsewhere after ``timeout``.
    """
    timeout = DEFAULT_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    poll_interval = DEFAULT_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
    if timeout <= 0:
        raise ValueError(f"timeout must be positive (got {timeout})")
    if poll_interval <= 0:
        raise ValueError(f"poll_interval must be positive (got {poll_interval})")

    deadline = time.monotonic() + timeout
    lock_path = lock_path_for(file_path)
    ensure_directory(lock_path.parent)

    mutex = _mutex_for(lock_path)
    if not mutex.acquire(timeout=timeout):
        raise LockTimeoutError(f"Could not lock {file_path} within {timeout}s")
    try:
        with open(lock_path, "a+", encoding="utf-8") as handle:
            while not _try_flock(handle):
                if time.monotonic() >= deadline:
                    raise LockTimeoutError(f"Could not lock {file_path} within {timeout}s")
                time.sleep(poll_interval)
            try:
                yield handle
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    finally:
        mutex.release()


def is_locked(target: PathLike) -> bool:
    """True when some other holder owns the ``flock`` of ``target`` right now."""
    lock_path = lock_path_for(target)
    if not lock_path.exists():
        return False
    with open(lock_path, "a+", encoding="utf-8") as handle:
        if not _try_flock(handle):
            return True
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    return False


def remove_lock_file(target: PathLike) -> None:
    """Delete the sidecar of ``target`` unless somebody holds it."""
    if not is_locked(target):
        lock_path_for(target).unlink(missing_ok=True)


__all__ = [
    "DEFAULT_LOCK_TIMEOUT_SECONDS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "LockTimeoutError",
    "acquire_file_lock",
    "is_locked",
    "lock_path_for",
    "remove_lock_file",
]
