"""
Producer outputs as seen by synthesis.

Producer payloads are opaque. Synthesis only reads the documented contract
fields, and every accessor here tolerates missing or mistyped values by
returning an empty value instead of raising.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from realitycheck.core.state.models import (
    CODE_EXPLORER,
    DOC_ANALYZER,
    ISSUE_SCANNER,
    ScanState,
)

LABEL_KEYS = ("name", "label", "title", "feature", "description")
OPEN_STATES = ("open", "opened", "in_progress", "todo", "")

_MARKER_SPLIT = re.compile(r"[\s:/_-]+")


def as_mapping(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def dig(data: Any, *keys: str) -> Any:
    """Follow ``keys`` through nested mappings; None when any step is missing."""
    current = data
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def item_label(item: Any) -> Optional[str]:
    """Return the short free-text label of a producer item.

    Strings are their own label; mappings use the first non-empty value of
    ``name``, ``label``, ``title``, ``feature`` or ``description``.
    """
    if isinstance(item, str):
        return item.strip() or None
    if isinstance(item, Mapping):
        for key in LABEL_KEYS:
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def labels_of(items: Iterable[Any]) -> List[str]:
    out: List[str] = []
    for item in items:
        label = item_label(item)
        if label is not None:
            out.append(label)
    return out


def is_open(item: Any) -> bool:
    """True unless a mapping item carries a non-open ``state`` or ``status``."""
    if not isinstance(item, Mapping):
        return True
    state = str(item.get("state") or item.get("status") or "").lower()
    return state in OPEN_STATES


def marker_tokens(item: Mapping[str, Any]) -> Set[str]:
    """Whole lowercase words of an item's labels, ``priority`` and ``severity``.

    ``"priority:high"`` and ``"P1-urgent"`` yield ``{"priority", "high"}`` and
    ``{"p1", "urgent"}``.
    """
    values: List[str] = []
    for raw in as_list(item.get("labels")):
        name = raw.get("name") if isinstance(raw, Mapping) else raw
        if isinstance(name, str):
            values.append(name)
    for key in ("priority", "severity"):
        if isinstance(item.get(key), str):
            values.append(item[key])
    return {
        token
        for value in values
        for token in _MARKER_SPLIT.split(value.lower())
        if token
    }


@dataclass
class ProducerOutputs:
    """The three producer payloads, each an empty mapping when absent."""

    issues: Dict[str, Any] = field(default_factory=dict)
    docs: Dict[str, Any] = field(default_factory=dict)
    code: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_state(cls, state: ScanState) -> "ProducerOutputs":
        return cls(
            issues=as_mapping(state.producer_payload(ISSUE_SCANNER)),
            docs=as_mapping(state.producer_payload(DOC_ANALYZER)),
            code=as_mapping(state.producer_payload(CODE_EXPLORER)),
        )

    def documented_labels(self) -> List[str]:
        """Labels of documented features plus labelled planned work items."""
        labels = labels_of(as_list(self.docs.get("documentedFeatures")))
        planned = self.docs.get("plannedWork")
        if isinstance(planned, Mapping):
            labels.extend(labels_of(as_list(planned.get("items"))))
        else:
            labels.extend(labels_of(as_list(planned)))
        return _dedupe(labels)

    def implemented_labels(self) -> List[str]:
        return _dedupe(labels_of(as_list(self.code.get("implementedFeatures"))))

    def categorized(self, category: str) -> List[Any]:
        return as_list(dig(self.issues, "categorized", category))


def _dedupe(labels: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for label in labels:
        if label not in seen:
            seen.add(label)
            out.append(label)
    return out


__all__ = [
    "OPEN_STATES",
    "ProducerOutputs",
    "as_list",
    "as_mapping",
    "dig",
    "is_open",
    "item_label",
    "labels_of",
    "marker_tokens",
]
