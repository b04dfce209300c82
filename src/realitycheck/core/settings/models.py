"""
Settings models.

Every leaf has a documented default so partial user input can be merged
field-by-field. ``FIELD_TABLE`` is the single description of what the
settings header may contain; values that do not match it fall back to the
default and are reported as parse misses.
"""
from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .grammar import SettingsParseMiss

SCAN_DEPTHS: Tuple[str, ...] = ("quick", "medium", "thorough")

DEFAULT_DOCS_PATHS: Tuple[str, ...] = ("docs/", "README.md", "CLAUDE.md", "PLAN.md")
DEFAULT_EXCLUDED_PATHS: Tuple[str, ...] = ("node_modules/", "dist/", ".git/")
DEFAULT_EXCLUDED_LABELS: Tuple[str, ...] = ("wontfix", "duplicate")
DEFAULT_PRIORITY_WEIGHTS: Dict[str, float] = {
    "security": 10,
    "bugs": 8,
    "features": 5,
    "docs": 3,
}
DEFAULT_REPORT_PATH = "reality-check-report.md"

_WEIGHT_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _is_scan_depth(value: Any) -> bool:
    return isinstance(value, str) and value in SCAN_DEPTHS


@dataclass(frozen=True)
class FieldSpec:
    """One leaf of the settings document."""

    kind: str
    check: Callable[[Any], bool]

    def accepts(self, value: Any) -> bool:
        return self.check(value)


FIELD_TABLE: Dict[str, FieldSpec] = {
    "sources.github_issues": FieldSpec("bool", _is_bool),
    "sources.linear": FieldSpec("bool", _is_bool),
    "sources.docs_paths": FieldSpec("list[str]", _is_str_list),
    "sources.code_exploration": FieldSpec("bool", _is_bool),
    "scan_depth": FieldSpec("quick|medium|thorough", _is_scan_depth),
    "output.write_to_file": FieldSpec("bool", _is_bool),
    "output.file_path": FieldSpec("str", _is_str),
    "output.display_summary": FieldSpec("bool", _is_bool),
    "exclusions.paths": FieldSpec("list[str]", _is_str_list),
    "exclusions.labels": FieldSpec("list[str]", _is_str_list),
}
WEIGHT_SPEC = FieldSpec("number", _is_number)
SECTIONS: Tuple[str, ...] = ("sources", "output", "priority_weights", "exclusions")


@dataclass
class SourceSettings:
    github_issues: bool = True
    linear: bool = False
    docs_paths: List[str] = field(default_factory=lambda: list(DEFAULT_DOCS_PATHS))
    code_exploration: bool = True


@dataclass
class OutputSettings:
    write_to_file: bool = True
    file_path: str = DEFAULT_REPORT_PATH
    display_summary: bool = True


@dataclass
class ExclusionSettings:
    paths: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_PATHS))
    labels: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_LABELS))


@dataclass
class Settings:
    """User-tunable configuration for a scan.

    Attributes:
        sources: Which producers run and where documentation lives
        scan_depth: quick | medium | thorough
        output: Report destination
        priority_weights: Numeric weight per work item category
        exclusions: Paths and issue labels to leave out
    """

    sources: SourceSettings = field(default_factory=SourceSettings)
    scan_depth: str = "thorough"
    output: OutputSettings = field(default_factory=OutputSettings)
    priority_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS)
    )
    exclusions: ExclusionSettings = field(default_factory=ExclusionSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert into the document layout (section order is fixed)."""
        weights: Dict[str, float] = {}
        for key in DEFAULT_PRIORITY_WEIGHTS:
            weights[key] = self.priority_weights.get(key, DEFAULT_PRIORITY_WEIGHTS[key])
        for key in sorted(self.priority_weights):
            if key not in weights:
                weights[key] = self.priority_weights[key]
        return {
            "sources": {
                "github_issues": self.sources.github_issues,
                "linear": self.sources.linear,
                "docs_paths": list(self.sources.docs_paths),
                "code_exploration": self.sources.code_exploration,
            },
            "scan_depth": self.scan_depth,
            "output": {
                "write_to_file": self.output.write_to_file,
                "file_path": self.output.file_path,
                "display_summary": self.output.display_summary,
            },
            "priority_weights": weights,
            "exclusions": {
                "paths": list(self.exclusions.paths),
                "labels": list(self.exclusions.labels),
            },
        }

    @classmethod
    def from_dict(
        cls,
        data: Optional[Mapping[str, Any]],
        *,
        misses: Optional[List[SettingsParseMiss]] = None,
    ) -> "Settings":
        """Merge ``data`` over the defaults, leaf by leaf.

        Leaves that are unknown or fail their type check keep the default
        and are appended to ``misses`` when a list is supplied.
        """
        sink: List[SettingsParseMiss] = misses if misses is not None else []
        merged = cls().to_dict()

        for top, value in (data or {}).items():
            if top == "priority_weights":
                if not isinstance(value, Mapping):
                    sink.append(SettingsParseMiss(top, "expected a section of numbers"))
                    continue
                for key, weight in value.items():
                    dotted = f"{top}.{key}"
                    if not _WEIGHT_KEY.match(str(key)) or not WEIGHT_SPEC.accepts(weight):
                        sink.append(SettingsParseMiss(dotted, "expected a number"))
                        continue
                    merged[top][key] = weight
            elif top in SECTIONS:
                if not isinstance(value, Mapping):
                    sink.append(SettingsParseMiss(top, "expected a section"))
                    continue
                for key, leaf in value.items():
                    dotted = f"{top}.{key}"
                    spec = FIELD_TABLE.get(dotted)
                    if spec is None:
                        sink.append(SettingsParseMiss(dotted, "unknown setting"))
                    elif not spec.accepts(leaf):
                        sink.append(SettingsParseMiss(dotted, f"expected {spec.kind}"))
                    else:
                        merged[top][key] = copy.deepcopy(leaf)
            else:
                spec = FIELD_TABLE.get(top)
                if spec is None:
                    sink.append(SettingsParseMiss(top, "unknown setting"))
                elif not spec.accepts(value):
                    sink.append(SettingsParseMiss(top, f"expected {spec.kind}"))
                else:
                    merged[top] = value

        return cls(
            sources=SourceSettings(**merged["sources"]),
            scan_depth=merged["scan_depth"],
            output=OutputSettings(**merged["output"]),
            priority_weights=dict(merged["priority_weights"]),
            exclusions=ExclusionSettings(**merged["exclusions"]),
        )

    def merged(self, changes: Mapping[str, Any]) -> "Settings":
        """Return a copy with ``changes`` applied.

        ``changes`` may be nested (``{"output": {"file_path": "x.md"}}``) or
        use dotted keys (``{"output.file_path": "x.md"}``).

        Raises:
            ValueError: If any change is unknown or has the wrong type.
        """
        current = self.to_dict()
        for key, value in expand_dotted(changes).items():
            if isinstance(value, Mapping) and isinstance(current.get(key), dict):
                current[key].update(value)
            else:
                current[key] = value

        misses: List[SettingsParseMiss] = []
        updated = Settings.from_dict(current, misses=misses)
        if misses:
            raise ValueError(
                "Invalid settings: " + "; ".join(m.describe() for m in misses)
            )
        return updated


def expand_dotted(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand ``{"a.b": 1}`` into ``{"a": {"b": 1}}`` (two levels at most)."""
    out: Dict[str, Any] = {}
    for key, value in changes.items():
        if "." in key:
            section, _, leaf = key.partition(".")
            if "." in leaf:
                raise ValueError(f"Settings keys nest at most two levels: {key}")
            bucket = out.setdefault(section, {})
            if not isinstance(bucket, dict):
                raise ValueError(f"Conflicting settings keys for {section}")
            bucket[leaf] = value
        elif isinstance(value, Mapping):
            bucket = out.setdefault(key, {})
            if not isinstance(bucket, dict):
                raise ValueError(f"Conflicting settings keys for {key}")
            bucket.update(value)
        else:
            out[key] = value
    return out


__all__ = [
    "SCAN_DEPTHS",
    "DEFAULT_PRIORITY_WEIGHTS",
    "DEFAULT_REPORT_PATH",
    "FIELD_TABLE",
    "FieldSpec",
    "SourceSettings",
    "OutputSettings",
    "ExclusionSettings",
    "Settings",
    "expand_dotted",
]
