"""
``realitycheck`` command line entry point.

Every sub-package of ``realitycheck.cli`` is a domain (``scan``,
``settings``) and every public module inside it is a command exposing
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``. Dropping a
module into a domain folder is enough to make it available.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import pkgutil
import sys
from types import ModuleType
from typing import Dict, List, Optional

from realitycheck import __version__
from realitycheck.core.exceptions import RealityCheckError
from realitycheck.core.paths import get_log_path
from realitycheck.core.stdlib_logging import configure_logging

logger = logging.getLogger(__name__)

CLI_PACKAGE = "realitycheck.cli"


def _public_modules(package: ModuleType) -> List[pkgutil.ModuleInfo]:
    return [
        info
        for info in pkgutil.iter_modules(package.__path__)
        if not info.name.startswith("_")
    ]


def discover_domains() -> List[str]:
    """Names of the command domains, sorted."""
    package = importlib.import_module(CLI_PACKAGE)
    return sorted(info.name for info in _public_modules(package) if info.ispkg)


def discover_commands(domain: str) -> Dict[str, ModuleType]:
    """Import and return the command modules of ``domain`` by command name."""
    package = importlib.import_module(f"{CLI_PACKAGE}.{domain}")
    commands: Dict[str, ModuleType] = {}
    for info in _public_modules(package):
        if info.ispkg:
            continue
        module = importlib.import_module(f"{package.__name__}.{info.name}")
        if callable(getattr(module, "main", None)):
            commands[info.name.replace("_", "-")] = module
    return commands


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="realitycheck",
        description="Compare what a project planned with what it actually built.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    domains = parser.add_subparsers(dest="domain", metavar="<domain>", title="domains")

    for domain in discover_domains():
        commands = discover_commands(domain)
        if not commands:
            continue
        domain_parser = domains.add_parser(domain, help=f"{domain} commands")
        domain_parser.set_defaults(_domain_parser=domain_parser)
        sub = domain_parser.add_subparsers(dest="command", metavar="<command>", title="commands")
        for name, module in sorted(commands.items()):
            summary = getattr(module, "SUMMARY", f"{domain} {name}")
            cmd_parser = sub.add_parser(name, help=summary, description=summary)
            register = getattr(module, "register_args", None)
            if register is not None:
                register(cmd_parser)
            cmd_parser.set_defaults(_func=module.main)
    return parser


def _setup_logging(args: argparse.Namespace) -> None:
    from realitycheck.cli._utils import get_repo_root

    try:
        configure_logging(
            log_path=get_log_path(get_repo_root(args)),
            verbose=bool(getattr(args, "verbose", False)),
        )
    except OSError as exc:
        print(f"Warning: file logging disabled: {exc}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one command and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    func = getattr(args, "_func", None)
    if func is None:
        (getattr(args, "_domain_parser", None) or parser).print_help()
        return 0

    _setup_logging(args)
    logger.debug("Running %s %s", args.domain, args.command)
    try:
        return int(func(args) or 0)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except RealityCheckError as exc:
        from realitycheck.cli._output import OutputFormatter

        logger.error("%s %s failed: %s", args.domain, args.command, exc)
        OutputFormatter(json_mode=bool(getattr(args, "json", False))).error(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
