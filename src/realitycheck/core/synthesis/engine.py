"""
Synthesis pipeline.

CrossReferencer -> DriftDetector / GapDetector -> Prioritizer ->
PlanBucketizer -> ReportBuilder, run in that order over one state snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from realitycheck.core.settings import Settings
from realitycheck.core.state.models import ScanState
from realitycheck.core.utils.time import format_timestamp, utc_now

from .buckets import Plan, PlanBucketizer
from .crossref import CrossReference, cross_reference
from .drift import DriftDetector, DriftRecord
from .gaps import GapDetector, GapRecord
from .inputs import ProducerOutputs
from .prioritizer import Prioritizer, WorkItem
from .report import Report, ReportBuilder

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    crossref: CrossReference
    drift: List[DriftRecord]
    gaps: List[GapRecord]
    work_items: List[WorkItem]
    plan: Plan
    report: Report


def synthesize(state: ScanState, *, now: Optional[Callable[[], datetime]] = None) -> SynthesisResult:
    """Run the full synthesis over ``state`` without touching persistence."""
    clock = now or utc_now
    settings = Settings.from_dict(state.settings)
    outputs = ProducerOutputs.from_state(state)

    crossref = cross_reference(outputs.documented_labels(), outputs.implemented_labels())
    drift = DriftDetector(now=clock).detect(outputs, crossref)
    gaps = GapDetector().detect(outputs)
    work_items = Prioritizer(
        settings.priority_weights, excluded_labels=settings.exclusions.labels
    ).prioritize(drift, gaps, outputs)
    plan = PlanBucketizer().bucketize(work_items)
    report = ReportBuilder().build(
        scan_id=state.id,
        generated_at=format_timestamp(clock()),
        drift=drift,
        gaps=gaps,
        crossref=crossref,
        work_items=work_items,
        plan=plan,
    )
    logger.info(
        "Synthesized scan %s: %d drift, %d gaps, %d work items (%d dropped from plan)",
        state.id,
        len(drift),
        len(gaps),
        len(work_items),
        plan.total_dropped,
    )
    return SynthesisResult(
        crossref=crossref,
        drift=drift,
        gaps=gaps,
        work_items=work_items,
        plan=plan,
        report=report,
    )


__all__ = ["SynthesisResult", "synthesize"]
