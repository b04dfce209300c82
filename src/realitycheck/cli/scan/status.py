"""
Reality Check scan status command.

SUMMARY: Show the state of the current scan
"""

from __future__ import annotations

import argparse

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores

SUMMARY = "Show the state of the current scan"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    _, state_store = open_stores(args)
    state = state_store.read()
    if state is None:
        if formatter.json_mode:
            formatter.json_output({"scan": None})
        else:
            formatter.text("No active scan")
        return 0

    if formatter.json_mode:
        formatter.json_output(state.to_dict())
        return 0

    formatter.text(f"Scan {state.id}")
    formatter.text_kv("status", state.scan.status)
    formatter.text_kv("phase", state.phases.current)
    formatter.text_kv("started", state.scan.started_at)
    formatter.text_kv("updated", state.scan.last_updated_at)
    if state.scan.completed_at:
        formatter.text_kv("completed", state.scan.completed_at)
    for pid, entry in state.producers.items():
        formatter.text_kv(pid, entry.status if entry is not None else "no result")
    for category, items in state.findings.items():
        formatter.text_kv(f"findings.{category}", len(items))
    return 0
