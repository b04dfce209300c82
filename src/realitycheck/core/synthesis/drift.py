"""
Drift detection.

Each rule is independent and reads only documented producer fields. A rule
that cannot find its inputs simply does not fire.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from realitycheck.core.utils.time import try_parse_iso8601, utc_now

from .crossref import CrossReference
from .inputs import ProducerOutputs, as_list, is_open, item_label, marker_tokens

logger = logging.getLogger(__name__)

PLAN_MIN_ITEMS = 5
PLAN_MIN_COMPLETION = 0.30
STALE_AFTER = timedelta(days=90)
DOCUMENTATION_LAG_THRESHOLD = 3
SCOPE_OVERCOMMIT_THRESHOLD = 5

PRIORITY_MARKERS: Tuple[str, ...] = ("critical", "security", "urgent", "high", "p0", "p1")
TRACKED_CATEGORIES: Tuple[str, ...] = ("security", "bugs", "features")

RECOMMENDATIONS: Dict[str, str] = {
    "plan-stagnation": "Re-baseline the plan: close or defer items that are no longer relevant and commit to a smaller next milestone.",
    "priority-neglect": "Triage the stale high-priority items now: fix, re-prioritize or close each one.",
    "documentation-lag": "Document the implemented features that are missing from the project documentation.",
    "scope-overcommit": "Trim documented scope to what is planned, or mark unimplemented features as future work.",
    "milestone-slippage": "Move the open items of overdue milestones to a realistic milestone or close the milestone.",
}


@dataclass
class DriftRecord:
    type: str
    severity: str
    category: str
    description: str
    affected_items: List[str] = field(default_factory=list)

    @property
    def recommendation(self) -> str:
        return RECOMMENDATIONS[self.type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "affectedItems": list(self.affected_items),
            "recommendation": self.recommendation,
        }


def plan_statistics(docs: Mapping[str, Any]) -> Optional[Tuple[int, int]]:
    """Return ``(total, completed)`` for the documented plan, or None.

    Counts come from ``plannedWork.{checkboxTotal, completedCount}``, the same
    keys at the top level, or a list of planned items with completion flags.
    """
    planned = docs.get("plannedWork")
    for source in (planned, docs):
        if isinstance(source, Mapping) and _is_count(source.get("checkboxTotal")):
            completed = source.get("completedCount")
            return int(source["checkboxTotal"]), int(completed) if _is_count(completed) else 0

    items = as_list(planned.get("items")) if isinstance(planned, Mapping) else as_list(planned)
    if not items:
        return None
    completed = sum(1 for item in items if _is_completed(item))
    return len(items), completed


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_completed(item: Any) -> bool:
    if not isinstance(item, Mapping):
        return False
    if any(item.get(key) is True for key in ("completed", "done", "checked")):
        return True
    return str(item.get("status") or "").lower() in ("completed", "done", "closed")


def _has_priority_marker(item: Mapping[str, Any], category: Optional[str]) -> bool:
    if category == "security":
        return True
    return not marker_tokens(item).isdisjoint(PRIORITY_MARKERS)


def _item_key(item: Mapping[str, Any]) -> Any:
    for key in ("id", "number", "url"):
        if item.get(key) is not None:
            return (key, str(item[key]))
    return ("label", item_label(item))


def tracked_items(issues: Mapping[str, Any]) -> List[Tuple[Optional[str], Dict[str, Any]]]:
    """Categorized issues followed by ``potentialDrift``, without duplicates."""
    categorized = issues.get("categorized") if isinstance(issues.get("categorized"), Mapping) else {}
    seen = set()
    out: List[Tuple[Optional[str], Dict[str, Any]]] = []
    sources: List[Tuple[Optional[str], List[Any]]] = [
        (cat, as_list(categorized.get(cat))) for cat in TRACKED_CATEGORIES
    ]
    sources.append((None, as_list(issues.get("potentialDrift"))))
    for category, items in sources:
        for item in items:
            if not isinstance(item, Mapping):
                continue
            key = _item_key(item)
            if key in seen:
                continue
            seen.add(key)
            out.append((category, dict(item)))
    return out


def _milestones(outputs: ProducerOutputs) -> List[Mapping[str, Any]]:
    return [
        m
        for m in as_list(outputs.issues.get("milestones")) + as_list(outputs.docs.get("milestones"))
        if isinstance(m, Mapping)
    ]


def _first(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


class DriftDetector:
    """Flag divergence between documented intent and observed state."""

    def __init__(self, now: Optional[Callable[[], datetime]] = None) -> None:
        self._now = now or utc_now

    def detect(self, outputs: ProducerOutputs, crossref: CrossReference) -> List[DriftRecord]:
        now = self._now()
        rules = (
            self._plan_stagnation(outputs),
            self._priority_neglect(outputs, now),
            self._documentation_lag(crossref),
            self._scope_overcommit(crossref),
            self._milestone_slippage(outputs, now),
        )
        records = [record for record in rules if record is not None]
        logger.debug("Drift rules fired: %s", [r.type for r in records])
        return records

    def _plan_stagnation(self, outputs: ProducerOutputs) -> Optional[DriftRecord]:
        stats = plan_statistics(outputs.docs)
        if stats is None:
            return None
        total, completed = stats
        if total <= PLAN_MIN_ITEMS or completed / total >= PLAN_MIN_COMPLETION:
            return None
        percent = round(100 * completed / total)
        return DriftRecord(
            type="plan-stagnation",
            severity="high",
            category="planning",
            description=f"Only {completed} of {total} planned items are complete ({percent}%).",
        )

    def _priority_neglect(self, outputs: ProducerOutputs, now: datetime) -> Optional[DriftRecord]:
        neglected: List[str] = []
        security = False
        for category, item in tracked_items(outputs.issues):
            if not is_open(item):
                continue
            updated = try_parse_iso8601(_first(item, "updatedAt", "updated_at"))
            if updated is None or now - updated <= STALE_AFTER:
                continue
            if not _has_priority_marker(item, category):
                continue
            neglected.append(item_label(item) or str(_item_key(item)[1]))
            security = security or category == "security" or "security" in marker_tokens(item)
        if not neglected:
            return None
        return DriftRecord(
            type="priority-neglect",
            severity="high",
            category="security" if security else "bugs",
            description=(
                f"{len(neglected)} high-priority item(s) have not been updated "
                f"in more than {STALE_AFTER.days} days."
            ),
            affected_items=neglected,
        )

    def _documentation_lag(self, crossref: CrossReference) -> Optional[DriftRecord]:
        undocumented = crossref.implemented_not_documented
        if len(undocumented) <= DOCUMENTATION_LAG_THRESHOLD:
            return None
        return DriftRecord(
            type="documentation-lag",
            severity="medium",
            category="docs",
            description=f"{len(undocumented)} implemented features are not documented.",
            affected_items=list(undocumented),
        )

    def _scope_overcommit(self, crossref: CrossReference) -> Optional[DriftRecord]:
        missing = crossref.documented_not_implemented
        if len(missing) <= SCOPE_OVERCOMMIT_THRESHOLD:
            return None
        return DriftRecord(
            type="scope-overcommit",
            severity="medium",
            category="features",
            description=f"{len(missing)} documented features have no implementation.",
            affected_items=list(missing),
        )

    def _milestone_slippage(self, outputs: ProducerOutputs, now: datetime) -> Optional[DriftRecord]:
        overdue: List[str] = []
        open_total = 0
        for milestone in _milestones(outputs):
            if str(milestone.get("state") or "").lower() == "closed":
                continue
            due = try_parse_iso8601(_first(milestone, "dueOn", "dueDate", "due_on"))
            open_items = _first(milestone, "openIssues", "open_issues", "openItems")
            if due is None or due >= now or not _is_count(open_items) or open_items == 0:
                continue
            overdue.append(item_label(milestone) or "untitled milestone")
            open_total += open_items
        if not overdue:
            return None
        return DriftRecord(
            type="milestone-slippage",
            severity="high",
            category="planning",
            description=(
                f"{len(overdue)} milestone(s) are past due with {open_total} open item(s) remaining."
            ),
            affected_items=overdue,
        )


__all__ = ["DriftDetector", "DriftRecord", "RECOMMENDATIONS", "plan_statistics", "tracked_items"]
