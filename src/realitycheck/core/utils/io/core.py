"""Text file primitives used by the state and settings stores.

Neither store ever rewrites a document in place. New content goes to a
sibling temp file which is fsync'd and then renamed over the target, so a
crash or a failing serializer leaves the previous document readable.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Callable, ContextManager, Optional, TextIO, Union

PathLike = Union[str, Path]
Writer = Callable[[TextIO], None]


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) when missing and return it.

    Raises:
        NotADirectoryError: If ``path`` exists and is a regular file.
    """
    directory = Path(path)
    if directory.exists() and not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def atomic_write(
    path: PathLike,
    write_fn: Writer,
    *,
    lock_cm: Optional[ContextManager[Any]] = None,
    encoding: str = "utf-8",
) -> None:
    """Replace ``path`` with whatever ``write_fn`` writes, all or nothing.

    ``lock_cm`` is held around the whole temp-write-rename sequence. Any
    exception raised by ``write_fn`` or the rename propagates after the temp
    file has been removed.
    """
    target = Path(path)
    ensure_directory(target.parent)

    with lock_cm or nullcontext():
        fd, tmp_name = tempfile.mkstemp(
            dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding=encoding) as handle:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                write_fn(handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


def read_text(path: PathLike) -> str:
    """Return the UTF-8 content of ``path``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    return Path(path).read_text(encoding="utf-8")


def write_text(path: PathLike, content: str) -> None:
    """Atomically replace ``path`` with ``content``."""
    atomic_write(path, lambda handle: handle.write(content))


__all__ = [
    "PathLike",
    "Writer",
    "atomic_write",
    "ensure_directory",
    "read_text",
    "write_text",
]
