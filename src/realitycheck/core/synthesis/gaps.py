"""Gap detection: missing capabilities and safeguards."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .inputs import ProducerOutputs, as_list, dig, is_open, item_label

logger = logging.getLogger(__name__)

SEVERITIES = ("critical", "high", "medium", "low")
DEFAULT_PASS_THROUGH_SEVERITY = "medium"


@dataclass
class GapRecord:
    type: str
    severity: str
    category: str
    description: str
    impact: str
    affected_items: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "impact": self.impact,
        }
        if self.affected_items:
            data["affectedItems"] = list(self.affected_items)
        return data


def _pass_through(raw: Any, fallback_category: str) -> Optional[GapRecord]:
    if isinstance(raw, str):
        description = raw.strip()
        if not description:
            return None
        return GapRecord(
            type="reported-gap",
            severity=DEFAULT_PASS_THROUGH_SEVERITY,
            category=fallback_category,
            description=description,
            impact="Reported by the producer.",
        )
    if not isinstance(raw, Mapping):
        return None
    severity = str(raw.get("severity") or "").lower()
    if severity not in SEVERITIES:
        severity = DEFAULT_PASS_THROUGH_SEVERITY
    description = raw.get("description") or item_label(raw) or "Unspecified gap"
    affected = [label for label in (item_label(i) for i in as_list(raw.get("affectedItems"))) if label]
    return GapRecord(
        type=str(raw.get("type") or "reported-gap"),
        severity=severity,
        category=str(raw.get("category") or fallback_category),
        description=str(description),
        impact=str(raw.get("impact") or "Reported by the producer."),
        affected_items=affected,
    )


class GapDetector:
    """Independent gap checks over producer outputs.

    A check fires only on an explicit ``false``; absent or unknown values
    never produce a gap.
    """

    def detect(self, outputs: ProducerOutputs) -> List[GapRecord]:
        gaps: List[GapRecord] = []

        if dig(outputs.code, "patterns", "hasTests") is False:
            gaps.append(
                GapRecord(
                    type="no-tests",
                    severity="critical",
                    category="testing",
                    description="No automated tests were found in the codebase.",
                    impact="Regressions ship unnoticed and refactoring is unsafe.",
                )
            )
        if dig(outputs.code, "health", "hasCI") is False:
            gaps.append(
                GapRecord(
                    type="no-ci",
                    severity="high",
                    category="infrastructure",
                    description="No continuous integration configuration was found.",
                    impact="Changes are merged without automated verification.",
                )
            )
        if dig(outputs.docs, "summary", "keyDocsPresent", "readme") is False:
            gaps.append(
                GapRecord(
                    type="no-readme",
                    severity="high",
                    category="docs",
                    description="The project has no README.",
                    impact="New contributors cannot learn how to build or use the project.",
                )
            )

        open_security = [
            item_label(item) or "untitled issue"
            for item in outputs.categorized("security")
            if is_open(item)
        ]
        if open_security:
            gaps.append(
                GapRecord(
                    type="open-security-issues",
                    severity="critical",
                    category="security",
                    description=f"{len(open_security)} open security issue(s) are tracked.",
                    impact="Known vulnerabilities remain exploitable.",
                    affected_items=open_security,
                )
            )

        for raw in as_list(outputs.docs.get("documentationGaps")):
            record = _pass_through(raw, "docs")
            if record is not None:
                gaps.append(record)
        for raw in as_list(outputs.code.get("gaps")):
            record = _pass_through(raw, "code")
            if record is not None:
                gaps.append(record)

        logger.debug("Gap checks fired: %s", [g.type for g in gaps])
        return gaps


__all__ = ["GapDetector", "GapRecord", "SEVERITIES"]
