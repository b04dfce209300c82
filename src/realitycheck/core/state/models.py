"""
Scan state models.

In-memory representation of the persisted run document. Persisted keys are
camelCase; ``to_dict``/``from_dict`` are the only place the mapping lives.
"""
from __future__ import annotations

import copy
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .phases import INITIAL_PHASE

SCHEMA_VERSION = "1.0.0"

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

ISSUE_SCANNER = "issueScanner"
DOC_ANALYZER = "docAnalyzer"
CODE_EXPLORER = "codeExplorer"
PRODUCER_IDS: Tuple[str, ...] = (ISSUE_SCANNER, DOC_ANALYZER, CODE_EXPLORER)

FINDING_CATEGORIES: Tuple[str, ...] = ("issues", "docs", "code", "drift", "gaps")


def generate_scan_id(now: datetime) -> str:
    """Return ``scan-YYYYMMDD-HHMMSS-<8 hex>`` for the given UTC time."""
    return f"scan-{now.strftime('%Y%m%d')}-{now.strftime('%H%M%S')}-{secrets.token_hex(4)}"


@dataclass
class ScanInfo:
    id: str
    status: str
    started_at: str
    last_updated_at: str
    completed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "startedAt": self.started_at,
            "lastUpdatedAt": self.last_updated_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanInfo":
        return cls(
            id=data["id"],
            status=data["status"],
            started_at=data["startedAt"],
            last_updated_at=data["lastUpdatedAt"],
            completed_at=data.get("completedAt"),
        )


@dataclass
class PhaseEntry:
    """One phase execution in the run history."""

    phase: str
    status: str
    started_at: str
    completed_at: Optional[str] = None
    result: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "phase": self.phase,
            "status": self.status,
            "startedAt": self.started_at,
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        if self.result is not None:
            data["result"] = self.result
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhaseEntry":
        return cls(
            phase=data["phase"],
            status=data["status"],
            started_at=data["startedAt"],
            completed_at=data.get("completedAt"),
            result=data.get("result"),
        )


@dataclass
class PhaseRecord:
    current: str = INITIAL_PHASE
    history: List[PhaseEntry] = field(default_factory=list)

    @property
    def last(self) -> Optional[PhaseEntry]:
        return self.history[-1] if self.history else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "history": [entry.to_dict() for entry in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhaseRecord":
        return cls(
            current=data["current"],
            history=[PhaseEntry.from_dict(e) for e in data.get("history") or []],
        )


@dataclass
class ProducerResult:
    status: str
    completed_at: str
    result: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "completedAt": self.completed_at,
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProducerResult":
        return cls(
            status=data["status"],
            completed_at=data["completedAt"],
            result=data.get("result"),
        )


@dataclass
class ScanState:
    """The persisted state of one scan run.

    Attributes:
        scan: Identity, status and timestamps
        settings: Snapshot of the settings the run started with (document layout)
        phases: Current phase and append-only history
        producers: Result per producer id, None until the producer reports
        findings: Append-only sequences per finding category
        report: Final report, None until report generation
        version: Schema version of the persisted document
    """

    scan: ScanInfo
    settings: Dict[str, Any]
    phases: PhaseRecord = field(default_factory=PhaseRecord)
    producers: Dict[str, Optional[ProducerResult]] = field(
        default_factory=lambda: {pid: None for pid in PRODUCER_IDS}
    )
    findings: Dict[str, List[Any]] = field(
        default_factory=lambda: {cat: [] for cat in FINDING_CATEGORIES}
    )
    report: Optional[Dict[str, Any]] = None
    version: str = SCHEMA_VERSION

    @property
    def id(self) -> str:
        return self.scan.id

    def producer_payload(self, producer_id: str) -> Any:
        """Return the opaque result of ``producer_id`` or None when absent."""
        entry = self.producers.get(producer_id)
        return entry.result if entry is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "scan": self.scan.to_dict(),
            "settings": copy.deepcopy(self.settings),
            "phases": self.phases.to_dict(),
            "producers": {
                pid: (entry.to_dict() if entry is not None else None)
                for pid, entry in self.producers.items()
            },
            "findings": {cat: list(items) for cat, items in self.findings.items()},
            "report": self.report,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanState":
        raw_producers = data.get("producers") or {}
        producers: Dict[str, Optional[ProducerResult]] = {}
        for pid in PRODUCER_IDS:
            raw = raw_producers.get(pid)
            producers[pid] = ProducerResult.from_dict(raw) if raw else None

        raw_findings = data.get("findings") or {}
        findings = {cat: list(raw_findings.get(cat) or []) for cat in FINDING_CATEGORIES}

        return cls(
            version=data.get("version", SCHEMA_VERSION),
            scan=ScanInfo.from_dict(data["scan"]),
            settings=dict(data.get("settings") or {}),
            phases=PhaseRecord.from_dict(data["phases"]),
            producers=producers,
            findings=findings,
            report=data.get("report"),
        )


__all__ = [
    "SCHEMA_VERSION",
    "STATUS_PENDING",
    "STATUS_IN_PROGRESS",
    "STATUS_COMPLETED",
    "ISSUE_SCANNER",
    "DOC_ANALYZER",
    "CODE_EXPLORER",
    "PRODUCER_IDS",
    "FINDING_CATEGORIES",
    "generate_scan_id",
    "ScanInfo",
    "PhaseEntry",
    "PhaseRecord",
    "ProducerResult",
    "ScanState",
]
