"""
Reality Check scan run command.

SUMMARY: Run a full scan and build the reconstruction plan

Each producer is either a JSON/YAML file with a precomputed result or a
command that prints its result as JSON on stdout.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Optional

from realitycheck.cli import OutputFormatter, add_standard_flags, open_stores
from realitycheck.core.exceptions import ScanFailedError
from realitycheck.core.orchestrator import CommandProducer, FileProducer, Producer, ScanRunner
from realitycheck.core.state import CODE_EXPLORER, DOC_ANALYZER, ISSUE_SCANNER

SUMMARY = "Run a full scan and build the reconstruction plan"

_SOURCES = (
    (ISSUE_SCANNER, "issues"),
    (DOC_ANALYZER, "docs"),
    (CODE_EXPLORER, "code"),
)


def register_args(parser: argparse.ArgumentParser) -> None:
    for _, name in _SOURCES:
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            f"--{name}",
            metavar="FILE",
            help=f"JSON/YAML file with the {name} producer result",
        )
        group.add_argument(
            f"--{name}-cmd",
            metavar="CMD",
            help=f"Command printing the {name} producer result as JSON",
        )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Producer timeout in seconds (default depends on scan_depth)",
    )
    add_standard_flags(parser)


def build_producers(args: argparse.Namespace) -> Dict[str, Producer]:
    timeout: Optional[float] = getattr(args, "timeout", None)
    producers: Dict[str, Producer] = {}
    for pid, name in _SOURCES:
        path = getattr(args, name, None)
        command = getattr(args, f"{name}_cmd", None)
        if path:
            producers[pid] = FileProducer(pid, Path(path))
        elif command:
            producers[pid] = CommandProducer(pid, command, timeout=timeout)
    return producers


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    settings_store, state_store = open_stores(args)
    runner = ScanRunner(
        state_store,
        settings_store,
        build_producers(args),
        timeout=getattr(args, "timeout", None),
    )
    try:
        outcome = runner.run()
    except ScanFailedError as exc:
        formatter.error(exc)
        return 1

    report = outcome.synthesis.report
    if formatter.json_mode:
        formatter.json_output(
            {
                "scanId": outcome.state.id,
                "producers": outcome.producers,
                "errors": outcome.errors,
                "summary": report.summary,
                "reportPath": str(outcome.report_path) if outcome.report_path else None,
            }
        )
        return 0

    settings = settings_store.read()
    formatter.text(f"Scan {outcome.state.id} completed")
    for pid, status in outcome.producers.items():
        detail = outcome.errors.get(pid)
        formatter.text_kv(pid, f"{status} ({detail})" if detail else status)
    if settings.output.display_summary:
        formatter.text("")
        for key, value in report.summary.items():
            formatter.text_kv(key, value)
    if outcome.report_path:
        formatter.text(f"Report written to {outcome.report_path}")
    return 0
