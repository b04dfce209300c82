"""
Reality Check settings show command.

SUMMARY: Show the effective settings
"""

from __future__ import annotations

import argparse

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores

SUMMARY = "Show the effective settings"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def _lines(data: dict, indent: int = 1) -> list[str]:
    prefix = "  " * indent
    lines = []
    for key, value in data.items():
        if isinstance(value, dict):
            lines.append(f"{prefix}{key}:")
            lines.extend(_lines(value, indent + 1))
        elif isinstance(value, list):
            lines.append(f"{prefix}{key}: [{', '.join(str(v) for v in value)}]")
        else:
            lines.append(f"{prefix}{key}: {value}")
    return lines


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    settings_store, _ = open_stores(args)
    settings = settings_store.read()
    misses = [miss.describe() for miss in settings_store.last_misses]

    if formatter.json_mode:
        formatter.json_output(
            {
                "path": str(settings_store.path),
                "exists": settings_store.exists(),
                "settings": settings.to_dict(),
                "parseMisses": misses,
            }
        )
        return 0

    source = settings_store.path if settings_store.exists() else "defaults"
    formatter.text(f"Settings ({source})")
    for line in _lines(settings.to_dict()):
        formatter.text(line)
    if misses:
        formatter.text("")
        formatter.text("Ignored (defaults used):")
        for miss in misses:
            formatter.text(f"  {miss}")
    return 0
