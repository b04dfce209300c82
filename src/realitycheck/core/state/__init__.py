"""Persisted scan state: models, the fixed phase sequence and the store."""
from __future__ import annotations

from .models import (
    CODE_EXPLORER,
    DOC_ANALYZER,
    FINDING_CATEGORIES,
    ISSUE_SCANNER,
    PRODUCER_IDS,
    SCHEMA_VERSION,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    PhaseEntry,
    PhaseRecord,
    ProducerResult,
    ScanInfo,
    ScanState,
    generate_scan_id,
)
from .phases import (
    COMPLETE,
    PARALLEL_SCAN,
    PHASES,
    REPORT_GENERATION,
    SETTINGS_CHECK,
    SYNTHESIS,
    next_phase,
)
from .store import StateStore

__all__ = [
    "CODE_EXPLORER",
    "DOC_ANALYZER",
    "FINDING_CATEGORIES",
    "ISSUE_SCANNER",
    "PRODUCER_IDS",
    "SCHEMA_VERSION",
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "STATUS_PENDING",
    "PhaseEntry",
    "PhaseRecord",
    "ProducerResult",
    "ScanInfo",
    "ScanState",
    "generate_scan_id",
    "COMPLETE",
    "PARALLEL_SCAN",
    "PHASES",
    "REPORT_GENERATION",
    "SETTINGS_CHECK",
    "SYNTHESIS",
    "next_phase",
    "StateStore",
]
