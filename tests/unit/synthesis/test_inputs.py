from __future__ import annotations

import pytest

from realitycheck.core.synthesis.inputs import is_open, marker_tokens


@pytest.mark.parametrize(
    "item, expected",
    [
        ("Plain string issue", True),
        ({"title": "No state"}, True),
        ({"state": "OPEN"}, True),
        ({"status": "in_progress"}, True),
        ({"state": "closed"}, False),
        ({"status": "done"}, False),
        ({"state": "merged"}, False),
    ],
)
def test_is_open(item, expected: bool) -> None:
    assert is_open(item) is expected


def test_marker_tokens_split_labels_into_words() -> None:
    item = {
        "labels": ["priority:High", {"name": "area/sync_engine"}, "syntax-highlighting", 3],
        "priority": "P1",
        "severity": None,
    }
    assert marker_tokens(item) == {
        "priority",
        "high",
        "area",
        "sync",
        "engine",
        "syntax",
        "highlighting",
        "p1",
    }
    assert marker_tokens({}) == set()
