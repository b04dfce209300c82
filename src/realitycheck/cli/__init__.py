"""Reality Check command line interface.

Commands live in domain folders (``scan/``, ``settings/``) and are found by
``_dispatcher``; the helpers below are what command modules share.
"""
from ._args import (
    add_force_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
    add_verbose_flag,
)
from ._output import OutputFormatter
from ._utils import get_repo_root, open_stores

__all__ = [
    "OutputFormatter",
    "add_force_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_verbose_flag",
    "get_repo_root",
    "open_stores",
]
