"""Two-level key:value grammar for the settings header block.

The settings document is markdown with a header delimited by ``---`` lines.
Only the header is machine-parsed, and only with this grammar::

    header   := line*
    line     := blank | comment | top | section | nested
    top      := KEY ":" SP value            (indent 0)
    section  := KEY ":"                     (indent 0, opens a section)
    nested   := "  " KEY ":" SP value       (indent 2, inside a section)
    value    := "true" | "false" | NUMBER | list | quoted | bare
    list     := "[" [ item ("," item)* ] "]"
    item     := quoted | bare

Anything else (deeper nesting, tabs, flow mappings, block lists, anchors)
is reported as a :class:`SettingsParseMiss` for that key and skipped. The
parser never attempts general YAML parsing.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

HEADER_PATTERN = re.compile(r"\A---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)
KEY_PATTERN = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_-]*)[ \t]*:(?P<raw>.*)$")
NUMBER_PATTERN = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?$")
_LIST_ITEM = re.compile(
    r"""\s*(?P<item>"(?:[^"\\]|\\.)*"|'[^']*'|[^,"'\[\]{}]+?)\s*(?P<sep>,|$)"""
)
_BARE_FORBIDDEN_START = set("[]{}&*!|>%@`\"'")

NESTED_INDENT = 2


class GrammarError(ValueError):
    """A value or line that falls outside the settings grammar."""


@dataclass(frozen=True)
class SettingsParseMiss:
    """A settings key that could not be used; its default applies instead."""

    key: str
    reason: str
    line: Optional[int] = None

    def describe(self) -> str:
        where = f" (line {self.line})" if self.line is not None else ""
        return f"{self.key}{where}: {self.reason}"


@dataclass
class HeaderDocument:
    """Result of parsing a settings document.

    Attributes:
        values: Parsed header values (top-level scalars/lists and one level of sections)
        misses: Lines or values that fell outside the grammar
        body: Markdown content after the header
        has_header: Whether a header block was found at all
    """

    values: Dict[str, Any] = field(default_factory=dict)
    misses: List[SettingsParseMiss] = field(default_factory=list)
    body: str = ""
    has_header: bool = False


def split_header(content: str) -> Tuple[Optional[str], str]:
    """Return ``(header, body)``; header is None when the document has none."""
    match = HEADER_PATTERN.match(content)
    if not match:
        return None, content
    return match.group(1) or "", content[match.end():]


def _parse_list_item(token: str) -> str:
    if token.startswith('"'):
        try:
            return json.loads(token)
        except json.JSONDecodeError as exc:
            raise GrammarError(f"invalid quoted list item {token!r}") from exc
    if token.startswith("'"):
        return token[1:-1]
    return token.strip()


def _parse_list(raw: str) -> List[str]:
    if not raw.endswith("]"):
        raise GrammarError("unterminated list")
    inner = raw[1:-1].strip()
    if not inner:
        return []

    items: List[str] = []
    pos = 0
    while True:
        match = _LIST_ITEM.match(inner, pos)
        if match is None:
            raise GrammarError(f"invalid list {raw!r}")
        items.append(_parse_list_item(match.group("item")))
        pos = match.end()
        if match.group("sep") == "":
            break
    if pos != len(inner):
        raise GrammarError(f"invalid list {raw!r}")
    return items


def parse_value(raw: str) -> Any:
    """Parse one grammar value.

    Raises:
        GrammarError: If ``raw`` is not a valid value.
    """
    raw = raw.strip()
    if raw == "":
        raise GrammarError("empty value")
    if raw == "true":
        return True
    if raw == "false":
        return False
    if NUMBER_PATTERN.match(raw):
        if re.search(r"[.eE]", raw):
            return float(raw)
        return int(raw)
    if raw.startswith("["):
        return _parse_list(raw)
    if raw.startswith('"'):
        if len(raw) < 2 or not raw.endswith('"'):
            raise GrammarError("unterminated quoted string")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GrammarError(f"invalid quoted string {raw!r}") from exc
        if not isinstance(value, str):
            raise GrammarError(f"invalid quoted string {raw!r}")
        return value
    if raw.startswith("'"):
        if len(raw) < 2 or not raw.endswith("'") or "'" in raw[1:-1]:
            raise GrammarError("invalid single-quoted string")
        return raw[1:-1]
    if raw[0] in _BARE_FORBIDDEN_START:
        raise GrammarError(f"unsupported value syntax {raw!r}")
    return raw


def parse_header(header: str) -> Tuple[Dict[str, Any], List[SettingsParseMiss]]:
    """Parse the header block into a dict plus the list of misses."""
    values: Dict[str, Any] = {}
    misses: List[SettingsParseMiss] = []
    section: Optional[str] = None

    for lineno, line in enumerate(header.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        body = line.lstrip(" ")
        indent = len(line) - len(body)
        match = KEY_PATTERN.match(stripped)
        if body.startswith("\t") or match is None:
            key = stripped.split(":", 1)[0].strip() or stripped
            if section is not None and indent > 0:
                key = f"{section}.{key}"
            misses.append(SettingsParseMiss(key, "line is not a 'key: value' pair", lineno))
            continue

        key = match.group("key")
        raw = match.group("raw").strip()

        if indent == 0:
            if raw == "":
                section = key
                values[key] = {}
                continue
            section = None
            try:
                values[key] = parse_value(raw)
            except GrammarError as exc:
                misses.append(SettingsParseMiss(key, str(exc), lineno))
            continue

        if indent == NESTED_INDENT and section is not None:
            dotted = f"{section}.{key}"
            if raw == "":
                misses.append(SettingsParseMiss(dotted, "nesting deeper than two levels", lineno))
                continue
            try:
                values[section][key] = parse_value(raw)
            except GrammarError as exc:
                misses.append(SettingsParseMiss(dotted, str(exc), lineno))
            continue

        dotted = f"{section}.{key}" if section is not None else key
        misses.append(SettingsParseMiss(dotted, f"unexpected indentation ({indent})", lineno))

    return values, misses


def parse_document(content: str) -> HeaderDocument:
    """Parse a full settings document (header + markdown body)."""
    header, body = split_header(content)
    if header is None:
        return HeaderDocument(body=content)
    values, misses = parse_header(header)
    return HeaderDocument(values=values, misses=misses, body=body, has_header=True)


def format_value(value: Any) -> str:
    """Render a value in the grammar; the inverse of :func:`parse_value`."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(json.dumps(str(v), ensure_ascii=False) for v in value) + "]"
    raise GrammarError(f"cannot represent {type(value).__name__} in settings grammar")


def format_header(values: Mapping[str, Any]) -> str:
    """Render ``values`` as a ``---`` delimited header, preserving key order."""
    lines: List[str] = []
    for key, value in values.items():
        if isinstance(value, Mapping):
            lines.append(f"{key}:")
            for sub_key, sub_value in value.items():
                lines.append(f"{' ' * NESTED_INDENT}{sub_key}: {format_value(sub_value)}")
        else:
            lines.append(f"{key}: {format_value(value)}")
    return "---\n" + "\n".join(lines) + "\n---\n"


__all__ = [
    "GrammarError",
    "SettingsParseMiss",
    "HeaderDocument",
    "split_header",
    "parse_value",
    "parse_header",
    "parse_document",
    "format_value",
    "format_header",
]
