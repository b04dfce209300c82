from __future__ import annotations

import pytest

from realitycheck.core.synthesis.buckets import (
    BACKLOG,
    BUCKET_ORDER,
    DEFAULT_CAPACITIES,
    IMMEDIATE,
    MEDIUM_TERM,
    SHORT_TERM,
    PlanBucketizer,
    classify,
)
from realitycheck.core.synthesis.prioritizer import WorkItem


def _item(severity: str, priority: float, order: int = 0) -> WorkItem:
    return WorkItem(type="gap-filling", title=f"item {order}", priority=priority, severity=severity, order=order)


@pytest.mark.parametrize(
    "severity, priority, bucket",
    [
        ("critical", 2, IMMEDIATE),
        ("medium", 15, IMMEDIATE),
        ("high", 8, SHORT_TERM),
        ("medium", 10, SHORT_TERM),
        ("medium", 5, MEDIUM_TERM),
        ("low", 4, BACKLOG),
    ],
)
def test_classify(severity: str, priority: float, bucket: str) -> None:
    assert classify(_item(severity, priority)) == bucket


def test_capacity_is_respected_and_overflow_counted() -> None:
    items = [_item("critical", 20, i) for i in range(8)]
    plan = PlanBucketizer().bucketize(items)
    assert [i.order for i in plan[IMMEDIATE]] == [0, 1, 2, 3, 4]
    assert plan.dropped[IMMEDIATE] == 3
    assert plan.total_dropped == 3
    assert plan.to_dict()["dropped"][IMMEDIATE] == 3


def test_every_item_lands_in_at_most_one_bucket() -> None:
    specs = [("critical", 25), ("high", 12), ("medium", 7), ("low", 2), ("medium", 16)]
    items = [_item(*specs[i % len(specs)], order=i) for i in range(120)]
    plan = PlanBucketizer().bucketize(items)

    placed = [item.order for name in BUCKET_ORDER for item in plan[name]]
    assert len(placed) == len(set(placed))
    for name in BUCKET_ORDER:
        assert len(plan[name]) <= DEFAULT_CAPACITIES[name]
    assert len(placed) + plan.total_dropped == len(items)


def test_custom_capacities() -> None:
    plan = PlanBucketizer(capacities={BACKLOG: 1}).bucketize([_item("low", 1, 0), _item("low", 1, 1)])
    assert [i.order for i in plan[BACKLOG]] == [0]
    assert plan.dropped[BACKLOG] == 1
