"""Validation of persisted documents against the bundled JSON Schemas.

Schemas live as YAML under ``realitycheck/data/schemas/`` and use JSON
Schema draft 2020-12.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, List

from jsonschema import Draft202012Validator

from realitycheck.data import read_yaml


@lru_cache(maxsize=8)
def _validator(schema_name: str) -> Draft202012Validator:
    schema = read_yaml("schemas", schema_name)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema {schema_name} must be a YAML mapping")
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_payload_safe(payload: Any, schema_name: str) -> List[str]:
    """Return one ``"<dotted.path>: <message>"`` line per violation.

    An empty list means ``payload`` is valid.
    """
    messages: List[str] = []
    errors = _validator(schema_name).iter_errors(payload)
    for error in sorted(errors, key=lambda e: [str(p) for p in e.path]):
        where = ".".join(str(part) for part in error.path)
        messages.append(f"{where}: {error.message}" if where else error.message)
    return messages


__all__ = ["validate_payload_safe"]
