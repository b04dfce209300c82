"""Persistent scan state store and phase machine.

The run state is one JSON document per project root. Every mutation is a
full read-modify-write cycle executed behind a single writer:

- a per-path thread mutex, so concurrent producers in one process queue up;
- an advisory ``flock`` on a sidecar lock file, so processes do the same;
- temp file + fsync + rename, so a failed write leaves the previous
  document intact.

Mutations return the updated :class:`ScanState`, or ``None`` when there is
no active run.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from realitycheck.core.exceptions import (
    PersistenceError,
    RealityCheckError,
    UnknownCategoryError,
    UnknownProducerError,
)
from realitycheck.core.paths import get_state_path, resolve_project_root
from realitycheck.core.schemas import validate_payload_safe
from realitycheck.core.settings import Settings
from realitycheck.core.utils.io import (
    LockTimeoutError,
    read_json,
    remove_lock_file,
    update_json,
    write_json_atomic,
)
from realitycheck.core.utils.time import Clock, format_timestamp, utc_now

from .models import (
    FINDING_CATEGORIES,
    PRODUCER_IDS,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    PhaseEntry,
    ProducerResult,
    ScanInfo,
    ScanState,
    generate_scan_id,
)
from .phases import INITIAL_PHASE, TERMINAL_PHASE, ensure_forward, next_phase, phase_index

logger = logging.getLogger(__name__)

STATE_SCHEMA = "scan-state.schema.yaml"

Mutator = Callable[[ScanState], None]


class StateStore:
    """Single source of truth for one project's scan run."""

    def __init__(
        self,
        project_root: Optional[Path] = None,
        *,
        path: Optional[Path] = None,
        clock: Optional[Clock] = None,
        lock_timeout: Optional[float] = None,
    ) -> None:
        self.project_root = Path(project_root) if project_root is not None else resolve_project_root()
        self.path = Path(path) if path is not None else get_state_path(self.project_root)
        self._clock = clock or utc_now
        self._lock_timeout = lock_timeout

    def _now(self) -> str:
        return format_timestamp(self._clock())

    # ------------------------------------------------------------------
    # Whole-document operations
    # ------------------------------------------------------------------

    def _decode(self, data: Any) -> ScanState:
        errors = validate_payload_safe(data, STATE_SCHEMA)
        if errors:
            raise PersistenceError(
                f"State document {self.path} is invalid: {'; '.join(errors)}",
                context={"path": str(self.path)},
            )
        return ScanState.from_dict(data)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[ScanState]:
        """Return the active run state, or None when no run exists.

        Raises:
            PersistenceError: If the document cannot be read or is invalid.
        """
        try:
            data = read_json(self.path, default=None)
        except (OSError, ValueError) as exc:
            logger.error("Error reading state %s: %s", self.path, exc)
            raise PersistenceError(
                f"Cannot read state: {exc}", context={"path": str(self.path)}
            ) from exc
        if data is None:
            return None
        return self._decode(data)

    def create(self, settings: Optional[Settings] = None) -> ScanState:
        """Start a fresh run, replacing any previous state document."""
        now_dt = self._clock()
        now = format_timestamp(now_dt)
        state = ScanState(
            scan=ScanInfo(
                id=generate_scan_id(now_dt),
                status=STATUS_PENDING,
                started_at=now,
                last_updated_at=now,
            ),
            settings=(settings or Settings()).to_dict(),
        )
        state.phases.current = INITIAL_PHASE
        self.write(state)
        logger.info("Created scan %s", state.id)
        return state

    def write(self, state: ScanState) -> None:
        """Persist ``state`` as-is, stamping ``lastUpdatedAt``.

        Raises:
            PersistenceError: If the document cannot be written.
        """
        state.scan.last_updated_at = self._now()
        try:
            write_json_atomic(self.path, state.to_dict(), lock_timeout=self._lock_timeout)
        except (OSError, LockTimeoutError, TypeError, ValueError) as exc:
            logger.error("Error writing state %s: %s", self.path, exc)
            raise PersistenceError(
                f"Cannot write state: {exc}", context={"path": str(self.path)}
            ) from exc

    def delete(self) -> bool:
        """Remove the persisted run. A missing document counts as success."""
        try:
            self.path.unlink(missing_ok=True)
            remove_lock_file(self.path)
        except OSError as exc:
            logger.error("Error deleting state %s: %s", self.path, exc)
            return False
        logger.info("Deleted scan state %s", self.path)
        return True

    def update(self, mutate: Mutator) -> Optional[ScanState]:
        """Apply ``mutate`` in one serialized read-modify-write cycle.

        Returns:
            The updated state, or None when there is no active run.

        Raises:
            PersistenceError: If reading or writing fails. The previous
                document is left untouched.
        """
        holder: Dict[str, ScanState] = {}

        def _apply(current: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
            if current is None:
                return None
            state = self._decode(current)
            mutate(state)
            state.scan.last_updated_at = self._now()
            holder["state"] = state
            return state.to_dict()

        try:
            update_json(self.path, _apply, lock_timeout=self._lock_timeout)
        except RealityCheckError:
            raise
        except (OSError, LockTimeoutError, TypeError, ValueError) as exc:
            logger.error("Error updating state %s: %s", self.path, exc)
            raise PersistenceError(
                f"Cannot update state: {exc}", context={"path": str(self.path)}
            ) from exc

        state = holder.get("state")
        if state is None:
            logger.debug("No active scan at %s; nothing to update", self.path)
        return state

    # ------------------------------------------------------------------
    # Phase machine
    # ------------------------------------------------------------------

    def start_phase(self, name: str) -> Optional[ScanState]:
        """Enter phase ``name``.

        Raises:
            InvalidPhaseError: If ``name`` is unknown or behind the current
                phase. The persisted state is not touched.
        """
        phase_index(name)

        def _start(state: ScanState) -> None:
            ensure_forward(state.phases.current, name)
            state.phases.current = name
            state.phases.history.append(
                PhaseEntry(phase=name, status=STATUS_IN_PROGRESS, started_at=self._now())
            )
            state.scan.status = STATUS_IN_PROGRESS

        state = self.update(_start)
        if state is not None:
            logger.info("Scan %s: started phase %s", state.id, name)
        return state

    def complete_phase(self, result: Any = None) -> Optional[ScanState]:
        """Complete the current phase and advance to the next one.

        The trailing in-progress entry of the current phase receives the
        result. When there is none, a completed entry is appended so every
        call leaves exactly one history entry behind.
        """

        def _complete(state: ScanState) -> None:
            now = self._now()
            current = state.phases.current
            entry = state.phases.last
            if entry is None or entry.status != STATUS_IN_PROGRESS or entry.phase != current:
                entry = PhaseEntry(phase=current, status=STATUS_IN_PROGRESS, started_at=now)
                state.phases.history.append(entry)
            entry.status = STATUS_COMPLETED
            entry.completed_at = now
            entry.result = result if result is not None else {}

            state.phases.current = next_phase(current)
            if state.phases.current == TERMINAL_PHASE:
                state.scan.status = STATUS_COMPLETED
                state.scan.completed_at = state.scan.completed_at or now
            else:
                state.scan.status = STATUS_IN_PROGRESS

        state = self.update(_complete)
        if state is not None:
            logger.info("Scan %s: phase is now %s", state.id, state.phases.current)
        return state

    # ------------------------------------------------------------------
    # Producer results, findings, report
    # ------------------------------------------------------------------

    def record_producer_result(self, producer_id: str, result: Any) -> Optional[ScanState]:
        """Store the opaque result of one producer under its own key.

        Raises:
            UnknownProducerError: If ``producer_id`` is not a known producer.
        """
        if producer_id not in PRODUCER_IDS:
            raise UnknownProducerError(
                f"Unknown producer: {producer_id!r}. Expected one of: {', '.join(PRODUCER_IDS)}",
                context={"producer": producer_id},
            )

        def _record(state: ScanState) -> None:
            state.producers[producer_id] = ProducerResult(
                status=STATUS_COMPLETED,
                completed_at=self._now(),
                result=result,
            )

        state = self.update(_record)
        if state is not None:
            logger.info("Scan %s: recorded result for %s", state.id, producer_id)
        return state

    def append_findings(self, category: str, items: Iterable[Any]) -> Optional[ScanState]:
        """Append ``items`` to one findings category, preserving order.

        Raises:
            UnknownCategoryError: If ``category`` is not a findings category.
        """
        if category not in FINDING_CATEGORIES:
            raise UnknownCategoryError(
                f"Unknown findings category: {category!r}. "
                f"Expected one of: {', '.join(FINDING_CATEGORIES)}",
                context={"category": category},
            )
        new_items = list(items)

        def _append(state: ScanState) -> None:
            state.findings[category] = list(state.findings.get(category) or []) + new_items

        return self.update(_append)

    def set_report(self, report: Dict[str, Any]) -> Optional[ScanState]:
        """Store the final report block."""

        def _set(state: ScanState) -> None:
            state.report = report

        return self.update(_set)


__all__ = ["StateStore", "STATE_SCHEMA"]
