"""
Reality Check scan reset command.

SUMMARY: Discard the persisted scan state
"""

from __future__ import annotations

import argparse

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores

SUMMARY = "Discard the persisted scan state"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    _, state_store = open_stores(args)
    existed = state_store.exists()
    if not state_store.delete():
        formatter.error(OSError(f"Could not delete {state_store.path}"))
        return 1
    formatter.success(
        {"deleted": existed, "path": str(state_store.path)},
        "Scan state removed" if existed else "No scan state to remove",
    )
    return 0
