"""Bundled resources: JSON Schemas (YAML) and Jinja2 templates."""
from __future__ import annotations

from functools import lru_cache
from importlib import resources
from typing import Any

import yaml

DATA_PACKAGE = "realitycheck.data"


def _resource(kind: str, filename: str):
    return resources.files(DATA_PACKAGE).joinpath(kind).joinpath(filename)


@lru_cache(maxsize=16)
def read_yaml(kind: str, filename: str) -> Any:
    """Parse ``data/<kind>/<filename>`` once per process."""
    return yaml.safe_load(_resource(kind, filename).read_text(encoding="utf-8"))


def read_text(kind: str, filename: str) -> str:
    return _resource(kind, filename).read_text(encoding="utf-8")


def clear_caches() -> None:
    read_yaml.cache_clear()


__all__ = ["DATA_PACKAGE", "clear_caches", "read_text", "read_yaml"]
