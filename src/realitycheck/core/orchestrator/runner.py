"""
Scan orchestration.

A run walks the fixed phase sequence once:

1. ``settings-check``: read settings, create a fresh state document.
2. ``parallel-scan``: run the enabled producers concurrently; each records
   its own result through the state store, whose writes are serialized.
3. ``synthesis``: cross-reference, detect drift and gaps, prioritize, bucket.
4. ``report-generation``: store the report and optionally write it to disk.

Producer failures and timeouts are contained: the producer's result stays
absent and the run continues. Producers still running at the barrier are
cancelled when they support it. Anything else that goes wrong aborts the run
with :class:`ScanFailedError` naming the phase.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from realitycheck.core.exceptions import ScanFailedError
from realitycheck.core.settings import Settings, SettingsStore
from realitycheck.core.state import (
    CODE_EXPLORER,
    DOC_ANALYZER,
    ISSUE_SCANNER,
    PARALLEL_SCAN,
    PRODUCER_IDS,
    REPORT_GENERATION,
    SETTINGS_CHECK,
    SYNTHESIS,
    ScanState,
    StateStore,
)
from realitycheck.core.synthesis import SynthesisResult, synthesize
from realitycheck.core.utils.io import write_text
from realitycheck.core.utils.time import utc_now

from .producers import PRODUCER_TIMEOUTS, Producer, producer_timeout

logger = logging.getLogger(__name__)

FINDINGS_CATEGORY: Dict[str, str] = {
    ISSUE_SCANNER: "issues",
    DOC_ANALYZER: "docs",
    CODE_EXPLORER: "code",
}

OUTCOME_COMPLETED = "completed"
OUTCOME_FAILED = "failed"
OUTCOME_TIMEOUT = "timeout"
OUTCOME_SKIPPED = "skipped"


def disabled_producers(settings: Settings) -> Dict[str, str]:
    """Return ``{producer_id: reason}`` for producers the settings switch off."""
    disabled: Dict[str, str] = {}
    if not settings.sources.github_issues and not settings.sources.linear:
        disabled[ISSUE_SCANNER] = "issue sources disabled"
    if not settings.sources.docs_paths:
        disabled[DOC_ANALYZER] = "no documentation paths configured"
    if not settings.sources.code_exploration:
        disabled[CODE_EXPLORER] = "code exploration disabled"
    return disabled


class _WriteGate:
    """Serializes producer writes and refuses them once the barrier passed.

    ``recorded`` names the producers whose result made it into the state.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._open = True
        self.recorded: Set[str] = set()

    def record(self, producer_id: str, result: Any) -> bool:
        with self._lock:
            if not self._open:
                return False
            self._store.record_producer_result(producer_id, result)
            findings = result.get("findings") if isinstance(result, Mapping) else None
            if isinstance(findings, list) and findings:
                self._store.append_findings(FINDINGS_CATEGORY[producer_id], findings)
            self.recorded.add(producer_id)
            return True

    def close(self) -> None:
        with self._lock:
            self._open = False


@dataclass
class ScanOutcome:
    """What a finished run produced."""

    state: ScanState
    synthesis: SynthesisResult
    producers: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    report_path: Optional[Path] = None


class ScanRunner:
    """Drive one scan run from settings to report."""

    def __init__(
        self,
        state_store: StateStore,
        settings_store: SettingsStore,
        producers: Mapping[str, Producer],
        *,
        timeout: Optional[float] = None,
        now: Optional[Callable[[], datetime]] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        unknown = sorted(set(producers) - set(PRODUCER_IDS))
        if unknown:
            raise ValueError(f"Unknown producer id(s): {', '.join(unknown)}")
        self.state_store = state_store
        self.settings_store = settings_store
        self.producers = dict(producers)
        self.timeout = timeout
        self.max_workers = max_workers
        self._now = now or utc_now

    @property
    def project_root(self) -> Path:
        return self.state_store.project_root

    def run(self) -> ScanOutcome:
        """Execute a full run.

        Raises:
            ScanFailedError: If a phase fails. Rerunning starts from scratch.
        """
        phase = SETTINGS_CHECK
        scan_id: Optional[str] = None
        try:
            settings = self.settings_store.read()
            state = self.state_store.create(settings)
            scan_id = state.id
            self.state_store.start_phase(SETTINGS_CHECK)
            self.state_store.complete_phase(
                {
                    "scanDepth": settings.scan_depth,
                    "parseMisses": [m.describe() for m in self.settings_store.last_misses],
                }
            )

            phase = PARALLEL_SCAN
            self.state_store.start_phase(PARALLEL_SCAN)
            statuses, errors = self._run_producers(settings)
            self.state_store.complete_phase({"producers": statuses, "errors": errors})

            phase = SYNTHESIS
            self.state_store.start_phase(SYNTHESIS)
            snapshot = self.state_store.read()
            if snapshot is None:
                raise ScanFailedError("Scan state disappeared during the run", phase=phase)
            result = synthesize(snapshot, now=self._now)
            self.state_store.append_findings("drift", [r.to_dict() for r in result.drift])
            self.state_store.append_findings("gaps", [g.to_dict() for g in result.gaps])
            self.state_store.complete_phase(
                {
                    "driftCount": len(result.drift),
                    "gapCount": len(result.gaps),
                    "totalWorkItems": len(result.work_items),
                }
            )

            phase = REPORT_GENERATION
            self.state_store.start_phase(REPORT_GENERATION)
            self.state_store.set_report(result.report.to_dict())
            report_path = self._write_report(settings, result)
            final = self.state_store.complete_phase(
                {"reportPath": str(report_path) if report_path else None}
            )
        except ScanFailedError:
            raise
        except Exception as exc:
            logger.error("Scan %s failed during phase %s: %s", scan_id or "?", phase, exc)
            raise ScanFailedError(
                f"Scan failed during phase '{phase}': {exc}. "
                "The run can be retried from scratch.",
                phase=phase,
                scan_id=scan_id,
            ) from exc

        if final is None:
            raise ScanFailedError("Scan state disappeared during the run", phase=REPORT_GENERATION)
        logger.info("Scan %s completed", final.id)
        return ScanOutcome(
            state=final,
            synthesis=result,
            producers=statuses,
            errors=errors,
            report_path=report_path,
        )

    def _run_producers(self, settings: Settings) -> tuple[Dict[str, str], Dict[str, str]]:
        statuses: Dict[str, str] = {}
        errors: Dict[str, str] = {}
        disabled = disabled_producers(settings)
        enabled: List[str] = []
        for pid in PRODUCER_IDS:
            if pid in disabled:
                statuses[pid] = OUTCOME_SKIPPED
                logger.info("Producer %s skipped: %s", pid, disabled[pid])
            elif pid not in self.producers:
                statuses[pid] = OUTCOME_SKIPPED
                logger.info("Producer %s skipped: not configured", pid)
            else:
                enabled.append(pid)
        if not enabled:
            return statuses, errors

        timeout = self.timeout if self.timeout is not None else producer_timeout(settings)
        gate = _WriteGate(self.state_store)
        root = self.project_root

        def _task(pid: str) -> None:
            result = self.producers[pid].run(settings, root)
            if not gate.record(pid, result):
                logger.warning("Producer %s finished after the scan barrier; result discarded", pid)

        executor = ThreadPoolExecutor(
            max_workers=self.max_workers or len(enabled),
            thread_name_prefix="realitycheck-producer",
        )
        try:
            futures: Dict[Future, str] = {executor.submit(_task, pid): pid for pid in enabled}
            done, not_done = wait(futures, timeout=timeout)
            gate.close()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for future in not_done:
            pid = futures[future]
            if pid in gate.recorded:
                statuses[pid] = OUTCOME_COMPLETED
                logger.info("Producer %s completed at the scan barrier", pid)
                continue
            cancel = getattr(self.producers[pid], "cancel", None)
            if callable(cancel):
                cancel()
            statuses[pid] = OUTCOME_TIMEOUT
            errors[pid] = f"timed out after {timeout:g}s"
            logger.error("Producer %s timed out after %ss", pid, timeout)
        for future in done:
            pid = futures[future]
            exc = future.exception()
            if exc is None:
                statuses[pid] = OUTCOME_COMPLETED
                logger.info("Producer %s completed", pid)
            else:
                statuses[pid] = OUTCOME_FAILED
                errors[pid] = str(exc)
                logger.error("Producer %s failed: %s", pid, exc)

        return {pid: statuses[pid] for pid in PRODUCER_IDS}, errors

    def _write_report(self, settings: Settings, result: SynthesisResult) -> Optional[Path]:
        if not settings.output.write_to_file:
            return None
        path = Path(settings.output.file_path)
        if not path.is_absolute():
            path = self.project_root / path
        write_text(path, result.report.markdown)
        logger.info("Wrote report to %s", path)
        return path


__all__ = [
    "FINDINGS_CATEGORY",
    "OUTCOME_COMPLETED",
    "OUTCOME_FAILED",
    "OUTCOME_SKIPPED",
    "OUTCOME_TIMEOUT",
    "PRODUCER_TIMEOUTS",
    "ScanOutcome",
    "ScanRunner",
    "disabled_producers",
    "producer_timeout",
]
