"""Running external producer commands without leaving orphans behind.

Commands run without a shell as leaders of a new session. On timeout the
whole process group gets SIGTERM, then SIGKILL after a short grace period,
so grandchildren spawned by a producer script die with it.
"""
from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from time import perf_counter
from typing import Callable, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]

KILL_GRACE_SECONDS = 0.2


def flatten_cmd(cmd: Command) -> list[str]:
    """Split a string command shell-style; pass sequences through as strings."""
    if isinstance(cmd, (list, tuple)):
        return [str(part) for part in cmd]
    return shlex.split(str(cmd))


def _signal_group(proc: subprocess.Popen, sig: int) -> None:
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass


def kill_process_group(proc: subprocess.Popen) -> None:
    """SIGTERM the group of ``proc``, then SIGKILL it after the grace period."""
    if proc.poll() is not None:
        return
    _signal_group(proc, signal.SIGTERM)
    try:
        proc.wait(timeout=KILL_GRACE_SECONDS)
        return
    except subprocess.TimeoutExpired:
        pass
    _signal_group(proc, signal.SIGKILL)
    try:
        proc.wait(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("Process %s did not exit after SIGKILL", proc.pid)


def run_capture(
    cmd: Command,
    *,
    timeout: float,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    input_text: Optional[str] = None,
    on_start: Optional[Callable[[subprocess.Popen], None]] = None,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` capturing text output, killing its process group on timeout.

    ``on_start`` receives the live process right after it is spawned, so a
    caller can kill it from another thread.

    Raises:
        subprocess.TimeoutExpired: When the command exceeds ``timeout``.
        OSError: When the command cannot be started.
    """
    argv = flatten_cmd(cmd)
    started = perf_counter()
    proc = subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        start_new_session=True,
    )
    if on_start is not None:
        on_start(proc)
    try:
        stdout, stderr = proc.communicate(input=input_text, timeout=timeout)
    except subprocess.TimeoutExpired:
        kill_process_group(proc)
        logger.warning("Command timed out after %.1fs: %s", timeout, shlex.join(argv))
        raise subprocess.TimeoutExpired(argv, timeout) from None

    logger.debug(
        "Command exited %s in %.2fs: %s", proc.returncode, perf_counter() - started, shlex.join(argv)
    )
    return subprocess.CompletedProcess(argv, proc.returncode, stdout=stdout, stderr=stderr)


__all__ = ["Command", "flatten_cmd", "kill_process_group", "run_capture"]
