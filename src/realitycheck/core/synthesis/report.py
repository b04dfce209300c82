"""Report rendering: summary counts plus a markdown document."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from jinja2 import Environment

from realitycheck.data import read_text

from .buckets import BUCKET_ORDER, Plan
from .crossref import CrossReference
from .drift import DriftRecord
from .gaps import GapRecord
from .prioritizer import WorkItem

REPORT_TEMPLATE = "report.md.j2"
BUCKET_TITLES: Dict[str, str] = {
    "immediate": "Immediate",
    "short-term": "Short-term",
    "medium-term": "Medium-term",
    "backlog": "Backlog",
}


@dataclass
class Report:
    summary: Dict[str, int]
    markdown: str
    details: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        data = {"summary": dict(self.summary), "markdown": self.markdown}
        data.update(self.details)
        return data


def summarize(
    drift: Sequence[DriftRecord],
    gaps: Sequence[GapRecord],
    work_items: Sequence[WorkItem],
    crossref: CrossReference,
) -> Dict[str, int]:
    return {
        "driftCount": len(drift),
        "gapCount": len(gaps),
        "totalWorkItems": len(work_items),
        "criticalCount": sum(1 for item in work_items if item.severity == "critical"),
        "alignedFeatures": len(crossref.aligned),
    }


class ReportBuilder:
    """Deterministic transform of synthesis outputs into a :class:`Report`."""

    def __init__(self) -> None:
        self._env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)
        self._template = self._env.from_string(read_text("templates", REPORT_TEMPLATE))

    def build(
        self,
        *,
        scan_id: str,
        generated_at: str,
        drift: Sequence[DriftRecord],
        gaps: Sequence[GapRecord],
        crossref: CrossReference,
        work_items: Sequence[WorkItem],
        plan: Plan,
    ) -> Report:
        summary = summarize(drift, gaps, work_items, crossref)
        drift_dicts = [record.to_dict() for record in drift]
        gap_dicts = [gap.to_dict() for gap in gaps]
        crossref_dict = crossref.to_dict()
        buckets: List[Dict[str, Any]] = [
            {
                "name": name,
                "title": BUCKET_TITLES[name],
                "items": [item.to_dict() for item in plan[name]],
                "dropped": plan.dropped[name],
            }
            for name in BUCKET_ORDER
        ]
        markdown = self._template.render(
            scan_id=scan_id,
            generated_at=generated_at,
            summary=summary,
            drift=drift_dicts,
            gaps=gap_dicts,
            crossref=crossref_dict,
            buckets=buckets,
        )
        details = {
            "generatedAt": generated_at,
            "drift": drift_dicts,
            "gaps": gap_dicts,
            "crossReference": crossref_dict,
            "plan": plan.to_dict(),
            "workItems": [item.to_dict() for item in work_items],
        }
        return Report(summary=summary, markdown=markdown, details=details)


__all__ = ["Report", "ReportBuilder", "summarize"]
