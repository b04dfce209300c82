"""
Cross-referencing of documented intent against implemented reality.

Matching is a cheap, permissive heuristic. Two labels match when any of
these holds:

- one normalized label contains the other;
- the edit distance between the normalized labels is below 3;
- a content word of one label and one of the other share a stem.

Stop words ("the", "for", "with" ...) never count as content words.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from rapidfuzz.distance import Levenshtein

MAX_EDIT_DISTANCE = 3
STEM_SUFFIXES: Tuple[str, ...] = ("ing", "es", "ed", "e", "s")
MIN_STEM_LENGTH = 3

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the",
        "and",
        "for",
        "from",
        "with",
        "into",
        "via",
        "onto",
        "over",
        "after",
        "before",
        "that",
        "this",
        "these",
        "those",
        "are",
        "was",
        "were",
        "has",
        "have",
        "will",
        "can",
        "not",
        "but",
        "all",
        "any",
        "new",
        "use",
        "add",
        "when",
        "where",
        "which",
        "what",
    }
)

_SEPARATORS = re.compile(r"[\s_-]+")
_WORD = re.compile(r"[a-z0-9]+")


def normalize(label: str) -> str:
    """Lowercase, drop whitespace/hyphens/underscores, strip one trailing ``s``."""
    text = _SEPARATORS.sub("", label.lower())
    if text.endswith("s"):
        text = text[:-1]
    return text


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def stem(word: str) -> str:
    for suffix in STEM_SUFFIXES:
        if word.endswith(suffix) and len(word) - len(suffix) >= MIN_STEM_LENGTH:
            return word[: -len(suffix)]
    return word


def _stems(label: str) -> set:
    return {
        stem(w)
        for w in _WORD.findall(label.lower())
        if len(w) >= MIN_STEM_LENGTH and w not in STOP_WORDS
    }


def labels_match(a: str, b: str) -> bool:
    """Return True when two free-text labels describe the same thing."""
    na, nb = normalize(a), normalize(b)
    if not na or not nb:
        return False
    if na in nb or nb in na:
        return True
    if levenshtein(na, nb) < MAX_EDIT_DISTANCE:
        return True
    return bool(_stems(a) & _stems(b))


@dataclass
class CrossReference:
    """Partition of documented and implemented labels.

    ``partially_implemented`` is reserved and never populated.
    """

    documented_not_implemented: List[str] = field(default_factory=list)
    implemented_not_documented: List[str] = field(default_factory=list)
    aligned: List[Dict[str, str]] = field(default_factory=list)
    partially_implemented: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentedNotImplemented": list(self.documented_not_implemented),
            "implementedNotDocumented": list(self.implemented_not_documented),
            "aligned": [dict(pair) for pair in self.aligned],
            "partiallyImplemented": list(self.partially_implemented),
        }


def cross_reference(documented: Iterable[str], implemented: Iterable[str]) -> CrossReference:
    """Classify every documented and every implemented label.

    Each documented label aligns with the first implemented label it matches.
    An implemented label counts as documented when any documented label
    matches it.
    """
    documented = list(documented)
    implemented = list(implemented)
    result = CrossReference()
    covered = set()

    for doc_label in documented:
        partner = None
        for idx, impl_label in enumerate(implemented):
            if labels_match(doc_label, impl_label):
                covered.add(idx)
                if partner is None:
                    partner = impl_label
        if partner is None:
            result.documented_not_implemented.append(doc_label)
        else:
            result.aligned.append({"documented": doc_label, "implemented": partner})

    result.implemented_not_documented = [
        label for idx, label in enumerate(implemented) if idx not in covered
    ]
    return result


__all__ = [
    "CrossReference",
    "cross_reference",
    "labels_match",
    "levenshtein",
    "normalize",
    "stem",
]
