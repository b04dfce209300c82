"""Flags shared by every Reality Check command."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo-root",
        metavar="PATH",
        help="Project to scan (default: REALITYCHECK_PROJECT_ROOT or auto-detected)",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Mirror the log file on stderr"
    )


def add_force_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--force", action="store_true", help="Overwrite an existing document")


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """``--json``, ``--repo-root`` and ``--verbose``."""
    add_json_flag(parser)
    add_repo_root_flag(parser)
    add_verbose_flag(parser)


__all__ = [
    "add_force_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_verbose_flag",
]
