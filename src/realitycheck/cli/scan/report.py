"""
Reality Check scan report command.

SUMMARY: Print the report of the last scan
"""

from __future__ import annotations

import argparse

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores

SUMMARY = "Print the report of the last scan"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    _, state_store = open_stores(args)
    state = state_store.read()
    if state is None or state.report is None:
        formatter.error(RuntimeError("No report available; run `realitycheck scan run` first"))
        return 1

    if formatter.json_mode:
        formatter.json_output(state.report)
    else:
        formatter.text(str(state.report.get("markdown", "")).rstrip())
    return 0
