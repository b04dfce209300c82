"""Printing command results as text or as JSON."""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional, TextIO

from realitycheck.core.exceptions import RealityCheckError


class OutputFormatter:
    """Route command output to stdout and errors to stderr.

    In JSON mode every call prints exactly one JSON document, so ``--json``
    output can be piped straight into other tools.
    """

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, payload: Any, stream: Optional[TextIO] = None) -> None:
        print(json.dumps(payload, indent=self.indent, default=str), file=stream or sys.stdout)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        if self.json_mode:
            self._dump({"status": status, **data})
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None) -> None:
        """Report ``error``; Reality Check errors keep their code and context."""
        text = message or str(error)
        if not self.json_mode:
            print(f"Error: {text}", file=sys.stderr)
            return
        if isinstance(error, RealityCheckError):
            payload = {**error.to_json_error(), "message": text}
        else:
            payload = {"code": type(error).__name__, "message": text, "context": {}}
        self._dump({"error": payload}, sys.stderr)

    def json_output(self, data: Any) -> None:
        self._dump(data)

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
