from __future__ import annotations

import pytest

from realitycheck.core.synthesis.gaps import GapDetector
from realitycheck.core.synthesis.inputs import ProducerOutputs


def _gaps(**outputs):
    return GapDetector().detect(ProducerOutputs(**outputs))


def test_missing_tests_and_ci() -> None:
    gaps = _gaps(code={"patterns": {"hasTests": False}, "health": {"hasCI": False}})
    assert [(g.type, g.severity, g.category) for g in gaps] == [
        ("no-tests", "critical", "testing"),
        ("no-ci", "high", "infrastructure"),
    ]


@pytest.mark.parametrize(
    "code",
    [
        {},
        {"patterns": {}, "health": {}},
        {"patterns": {"hasTests": None}, "health": {"hasCI": "false"}},
        {"patterns": {"hasTests": True}, "health": {"hasCI": True}},
        {"patterns": "unknown"},
    ],
)
def test_unknown_fields_never_fire(code) -> None:
    assert _gaps(code=code) == []


def test_missing_readme() -> None:
    gaps = _gaps(docs={"summary": {"keyDocsPresent": {"readme": False}}})
    assert [(g.type, g.severity) for g in gaps] == [("no-readme", "high")]


def test_open_security_issues_are_enumerated() -> None:
    issues = {
        "categorized": {
            "security": [
                {"title": "XSS in comments", "state": "open"},
                {"title": "Old CVE", "state": "closed"},
                "SQL injection",
            ]
        }
    }
    gaps = _gaps(issues=issues)
    assert len(gaps) == 1
    gap = gaps[0]
    assert (gap.type, gap.severity, gap.category) == ("open-security-issues", "critical", "security")
    assert gap.affected_items == ["XSS in comments", "SQL injection"]
    assert gap.to_dict()["affectedItems"] == ["XSS in comments", "SQL injection"]


def test_producer_gaps_pass_through() -> None:
    gaps = _gaps(
        docs={
            "documentationGaps": [
                "Missing API reference",
                {"description": "No changelog", "severity": "low"},
            ]
        },
        code={"gaps": [{"type": "dead-code", "severity": "bogus", "description": "Unused modules"}]},
    )
    assert [(g.type, g.severity, g.category, g.description) for g in gaps] == [
        ("reported-gap", "medium", "docs", "Missing API reference"),
        ("reported-gap", "low", "docs", "No changelog"),
        ("dead-code", "medium", "code", "Unused modules"),
    ]
    assert "affectedItems" not in gaps[0].to_dict()
