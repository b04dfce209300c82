"""JSON Schema checks for the scan state document."""
from __future__ import annotations

from .validation import validate_payload_safe

__all__ = ["validate_payload_safe"]
