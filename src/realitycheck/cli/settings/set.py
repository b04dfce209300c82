"""
Reality Check settings set command.

SUMMARY: Update one or more settings

Values use the settings header grammar:
``scan_depth=quick``, ``output.write_to_file=false``,
``exclusions.labels=[wontfix, "needs info"]``, ``priority_weights.testing=4``.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores
from realitycheck.core.settings import GrammarError, parse_value

SUMMARY = "Update one or more settings"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "assignments",
        nargs="+",
        metavar="KEY=VALUE",
        help="Setting to change, e.g. scan_depth=quick or output.file_path=report.md",
    )
    add_standard_flags(parser)


def parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs with the settings value grammar.

    Raises:
        ValueError: If a pair has no ``=`` or its value is outside the grammar.
    """
    changes: Dict[str, Any] = {}
    for item in assignments:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        try:
            changes[key] = parse_value(raw)
        except GrammarError as exc:
            raise ValueError(f"Invalid value for {key}: {exc}") from exc
    return changes


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    settings_store, _ = open_stores(args)
    try:
        changes = parse_assignments(args.assignments)
        settings = settings_store.update(changes)
    except ValueError as exc:
        formatter.error(exc)
        return 1

    formatter.success(
        {"path": str(settings_store.path), "settings": settings.to_dict()},
        f"Updated {', '.join(sorted(changes))} in {settings_store.path}",
    )
    return 0
