"""
Producer adapters.

A producer analyzes one information source and returns an opaque,
JSON-serializable result. The core ships generic adapters only; the
analysis itself lives in whatever file or command they point at.
"""
from __future__ import annotations

import json
import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Set

import yaml

from realitycheck.core.exceptions import ProducerError
from realitycheck.core.settings import Settings
from realitycheck.core.utils.io import read_text
from realitycheck.core.utils.subprocess import (
    Command,
    flatten_cmd,
    kill_process_group,
    run_capture,
)

logger = logging.getLogger(__name__)

SETTINGS_ENV = "REALITYCHECK_SETTINGS"
YAML_SUFFIXES = (".yaml", ".yml")
PRODUCER_TIMEOUTS: Dict[str, float] = {"quick": 60.0, "medium": 180.0, "thorough": 600.0}


def producer_timeout(settings: Settings) -> float:
    return PRODUCER_TIMEOUTS.get(settings.scan_depth, PRODUCER_TIMEOUTS["thorough"])


class Producer(Protocol):
    """Anything with a ``producer_id`` and a ``run`` method.

    A producer may also offer ``cancel()``; the runner calls it for producers
    still running when the scan barrier passes.
    """

    producer_id: str

    def run(self, settings: Settings, project_root: Path) -> Any:
        ...


class FileProducer:
    """Load a precomputed result from a JSON or YAML file."""

    def __init__(self, producer_id: str, path: Path) -> None:
        self.producer_id = producer_id
        self.path = Path(path)

    def run(self, settings: Settings, project_root: Path) -> Any:
        path = self.path if self.path.is_absolute() else project_root / self.path
        try:
            text = read_text(path)
        except OSError as exc:
            raise ProducerError(
                f"Cannot read producer output {path}: {exc}",
                producer_id=self.producer_id,
                context={"path": str(path)},
            ) from exc
        try:
            if path.suffix.lower() in YAML_SUFFIXES:
                return yaml.safe_load(text)
            return json.loads(text)
        except (ValueError, yaml.YAMLError) as exc:
            raise ProducerError(
                f"Invalid producer output in {path}: {exc}",
                producer_id=self.producer_id,
                context={"path": str(path)},
            ) from exc


class CommandProducer:
    """Run an external command and parse its stdout as JSON.

    The active settings are passed as JSON on stdin and in the
    ``REALITYCHECK_SETTINGS`` environment variable. Without an explicit
    ``timeout`` the command gets the scan-depth default of
    :func:`producer_timeout`. :meth:`cancel` kills every command still
    running, together with its process group.
    """

    def __init__(self, producer_id: str, command: Command, *, timeout: Optional[float] = None) -> None:
        self.producer_id = producer_id
        self.command = flatten_cmd(command)
        self.timeout = timeout
        self._live: Set[subprocess.Popen] = set()
        self._lock = threading.Lock()

    def _started(self, proc: subprocess.Popen) -> None:
        with self._lock:
            self._live.add(proc)

    def cancel(self) -> None:
        with self._lock:
            live = list(self._live)
        for proc in live:
            logger.warning("Killing producer %s command (pid %s)", self.producer_id, proc.pid)
            kill_process_group(proc)

    def run(self, settings: Settings, project_root: Path) -> Any:
        timeout = self.timeout if self.timeout is not None else producer_timeout(settings)
        payload = json.dumps(settings.to_dict())
        env = dict(os.environ)
        env[SETTINGS_ENV] = payload
        context = {"command": self.command}
        try:
            completed = run_capture(
                self.command,
                timeout=timeout,
                cwd=project_root,
                env=env,
                input_text=payload,
                on_start=self._started,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProducerError(
                f"Producer command timed out after {exc.timeout}s",
                producer_id=self.producer_id,
                context=context,
            ) from exc
        except OSError as exc:
            raise ProducerError(
                f"Cannot start producer command: {exc}",
                producer_id=self.producer_id,
                context=context,
            ) from exc
        finally:
            with self._lock:
                self._live = {proc for proc in self._live if proc.returncode is None}

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            raise ProducerError(
                f"Producer command exited with {completed.returncode}: {stderr[:500]}",
                producer_id=self.producer_id,
                context={**context, "returncode": completed.returncode},
            )
        try:
            return json.loads(completed.stdout or "null")
        except ValueError as exc:
            raise ProducerError(
                f"Producer command did not print JSON: {exc}",
                producer_id=self.producer_id,
                context=context,
            ) from exc


class CallableProducer:
    """Wrap a plain function ``fn(settings, project_root) -> result``."""

    def __init__(self, producer_id: str, fn: Callable[[Settings, Path], Any]) -> None:
        self.producer_id = producer_id
        self._fn = fn

    def run(self, settings: Settings, project_root: Path) -> Any:
        return self._fn(settings, project_root)


__all__ = [
    "CallableProducer",
    "CommandProducer",
    "FileProducer",
    "PRODUCER_TIMEOUTS",
    "Producer",
    "SETTINGS_ENV",
    "producer_timeout",
]
