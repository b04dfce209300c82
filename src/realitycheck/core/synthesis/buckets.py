"""Time-horizon buckets for the reconstruction plan."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .prioritizer import WorkItem

IMMEDIATE = "immediate"
SHORT_TERM = "short-term"
MEDIUM_TERM = "medium-term"
BACKLOG = "backlog"

BUCKET_ORDER = (IMMEDIATE, SHORT_TERM, MEDIUM_TERM, BACKLOG)
DEFAULT_CAPACITIES: Dict[str, int] = {
    IMMEDIATE: 5,
    SHORT_TERM: 10,
    MEDIUM_TERM: 15,
    BACKLOG: 20,
}


def classify(item: WorkItem) -> str:
    if item.severity == "critical" or item.priority >= 15:
        return IMMEDIATE
    if item.severity == "high" or item.priority >= 10:
        return SHORT_TERM
    if item.priority >= 5:
        return MEDIUM_TERM
    return BACKLOG


@dataclass
class Plan:
    buckets: Dict[str, List[WorkItem]] = field(
        default_factory=lambda: {name: [] for name in BUCKET_ORDER}
    )
    dropped: Dict[str, int] = field(default_factory=lambda: {name: 0 for name in BUCKET_ORDER})

    def __getitem__(self, name: str) -> List[WorkItem]:
        return self.buckets[name]

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            name: [item.to_dict() for item in self.buckets[name]] for name in BUCKET_ORDER
        }
        data["dropped"] = dict(self.dropped)
        return data


class PlanBucketizer:
    """Partition sorted work items into capacity-limited buckets.

    Items past a bucket's capacity are left out of the plan and counted in
    ``Plan.dropped``; they stay available in the prioritized list.
    """

    def __init__(self, capacities: Optional[Mapping[str, int]] = None) -> None:
        self.capacities = dict(DEFAULT_CAPACITIES)
        if capacities:
            self.capacities.update(capacities)

    def bucketize(self, items: Iterable[WorkItem]) -> Plan:
        plan = Plan()
        for item in items:
            name = classify(item)
            if len(plan.buckets[name]) < self.capacities[name]:
                plan.buckets[name].append(item)
            else:
                plan.dropped[name] += 1
        return plan


__all__ = [
    "BACKLOG",
    "BUCKET_ORDER",
    "DEFAULT_CAPACITIES",
    "IMMEDIATE",
    "MEDIUM_TERM",
    "SHORT_TERM",
    "Plan",
    "PlanBucketizer",
    "classify",
]
