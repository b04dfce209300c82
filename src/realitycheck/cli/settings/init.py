"""
Reality Check settings init command.

SUMMARY: Write the default settings document
"""

from __future__ import annotations

import argparse

from realitycheck.cli import OutputFormatter, add_force_flag, add_standard_flags, open_stores

SUMMARY = "Write the default settings document"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_force_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    settings_store, _ = open_stores(args)
    if settings_store.exists() and not args.force:
        formatter.error(
            FileExistsError(f"{settings_store.path} already exists (use --force to overwrite)")
        )
        return 1

    settings_store.reset()
    formatter.success(
        {"path": str(settings_store.path)},
        f"Wrote default settings to {settings_store.path}",
    )
    return 0
