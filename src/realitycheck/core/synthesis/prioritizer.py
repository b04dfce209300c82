"""
Work item projection and scoring.

``score = SEVERITY_BASE[severity] + weight(category) + security boost``

The security boost adds the configured ``security`` weight a second time
when either the item type or its category denotes security.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .drift import DriftRecord
from .gaps import GapRecord
from .inputs import ProducerOutputs, as_list, is_open, item_label, marker_tokens

logger = logging.getLogger(__name__)

SEVERITY_BASE: Dict[str, int] = {"critical": 10, "high": 8, "medium": 5, "low": 2}

TYPE_DRIFT = "drift-correction"
TYPE_GAP = "gap-filling"
TYPE_ISSUE = "issue"

ISSUE_CATEGORIES = ("security", "bugs", "features")
DEFAULT_ISSUE_SEVERITY: Dict[str, str] = {
    "security": "high",
    "bugs": "medium",
    "features": "low",
}
_SEVERITY_MARKERS = (
    ("critical", ("critical", "p0", "blocker")),
    ("high", ("high", "p1", "urgent")),
    ("medium", ("medium", "p2")),
    ("low", ("low", "p3", "minor")),
)


@dataclass(frozen=True)
class WorkItem:
    """A scored finding, ready for bucketing."""

    type: str
    title: str
    priority: float
    severity: str
    category: Optional[str] = None
    recommendation: Optional[str] = None
    impact: Optional[str] = None
    source: Optional[str] = None
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "priority": self.priority,
            "severity": self.severity,
            "category": self.category,
            "recommendation": self.recommendation,
            "impact": self.impact,
            "source": self.source,
        }


def is_security(item_type: Optional[str], category: Optional[str]) -> bool:
    return any("security" in (value or "").lower() for value in (item_type, category))


def score(
    severity: str,
    category: Optional[str],
    weights: Mapping[str, float],
    *,
    item_type: Optional[str] = None,
) -> float:
    """Return the priority score of one finding."""
    total = SEVERITY_BASE.get(severity, 0) + (weights.get(category, 0) if category else 0)
    if is_security(item_type, category):
        total += weights.get("security", 0)
    return total


def issue_severity(item: Mapping[str, Any], category: str) -> str:
    """Derive a severity from an issue's labels, priority or severity fields.

    Markers are matched as whole words, so ``workflow`` is not ``low``.
    """
    markers = marker_tokens(item)
    for severity, tokens in _SEVERITY_MARKERS:
        if not markers.isdisjoint(tokens):
            return severity
    return DEFAULT_ISSUE_SEVERITY[category]


def _issue_labels(item: Mapping[str, Any]) -> List[str]:
    out: List[str] = []
    for raw in as_list(item.get("labels")):
        name = raw.get("name") if isinstance(raw, Mapping) else raw
        if isinstance(name, str):
            out.append(name.lower())
    return out


class Prioritizer:
    """Project drift, gaps and tracked issues into sorted work items."""

    def __init__(
        self,
        weights: Mapping[str, float],
        *,
        excluded_labels: Sequence[str] = (),
    ) -> None:
        self.weights = dict(weights)
        self.excluded_labels = {label.lower() for label in excluded_labels}

    def _item(self, order: int, finding_type: Optional[str], **fields: Any) -> WorkItem:
        priority = score(
            fields["severity"], fields.get("category"), self.weights, item_type=finding_type
        )
        return WorkItem(priority=priority, order=order, **fields)

    def project(
        self,
        drift: Iterable[DriftRecord],
        gaps: Iterable[GapRecord],
        outputs: Optional[ProducerOutputs] = None,
    ) -> List[WorkItem]:
        """Project findings in discovery order: drift, then gaps, then issues."""
        items: List[WorkItem] = []
        for record in drift:
            items.append(
                self._item(
                    len(items),
                    record.type,
                    type=TYPE_DRIFT,
                    title=record.description,
                    severity=record.severity,
                    category=record.category,
                    recommendation=record.recommendation,
                    source=f"drift:{record.type}",
                )
            )
        for gap in gaps:
            items.append(
                self._item(
                    len(items),
                    gap.type,
                    type=TYPE_GAP,
                    title=gap.description,
                    severity=gap.severity,
                    category=gap.category,
                    impact=gap.impact,
                    source=f"gap:{gap.type}",
                )
            )
        if outputs is not None:
            for category in ISSUE_CATEGORIES:
                for raw in outputs.categorized(category):
                    if not isinstance(raw, Mapping):
                        raw = {"title": raw} if isinstance(raw, str) else None
                    if raw is None or not is_open(raw):
                        continue
                    if self.excluded_labels.intersection(_issue_labels(raw)):
                        logger.debug("Skipping excluded issue %s", item_label(raw))
                        continue
                    ref = raw.get("number") or raw.get("id") or item_label(raw)
                    items.append(
                        self._item(
                            len(items),
                            None,
                            type=TYPE_ISSUE,
                            title=item_label(raw) or f"Untitled {category} issue",
                            severity=issue_severity(raw, category),
                            category=category,
                            source=f"issue:{category}:{ref}",
                        )
                    )
        return items

    def prioritize(
        self,
        drift: Iterable[DriftRecord],
        gaps: Iterable[GapRecord],
        outputs: Optional[ProducerOutputs] = None,
    ) -> List[WorkItem]:
        """Return every work item sorted by descending score.

        The sort is stable, so discovery order breaks ties.
        """
        return sort_work_items(self.project(drift, gaps, outputs))


def sort_work_items(items: Iterable[WorkItem]) -> List[WorkItem]:
    return sorted(items, key=lambda item: -item.priority)


__all__ = [
    "SEVERITY_BASE",
    "TYPE_DRIFT",
    "TYPE_GAP",
    "TYPE_ISSUE",
    "Prioritizer",
    "WorkItem",
    "is_security",
    "issue_severity",
    "score",
    "sort_work_items",
]
