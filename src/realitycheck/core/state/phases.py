"""The fixed, ordered phase sequence of a scan run."""
from __future__ import annotations

from typing import Tuple

from realitycheck.core.exceptions import InvalidPhaseError

SETTINGS_CHECK = "settings-check"
PARALLEL_SCAN = "parallel-scan"
SYNTHESIS = "synthesis"
REPORT_GENERATION = "report-generation"
COMPLETE = "complete"

PHASES: Tuple[str, ...] = (
    SETTINGS_CHECK,
    PARALLEL_SCAN,
    SYNTHESIS,
    REPORT_GENERATION,
    COMPLETE,
)
INITIAL_PHASE = PHASES[0]
TERMINAL_PHASE = PHASES[-1]


def phase_index(name: str) -> int:
    """Return the position of ``name`` in :data:`PHASES`.

    Raises:
        InvalidPhaseError: If ``name`` is not a known phase.
    """
    try:
        return PHASES.index(name)
    except ValueError:
        raise InvalidPhaseError(
            f"Invalid phase: {name!r}. Expected one of: {', '.join(PHASES)}",
            context={"phase": name},
        ) from None


def next_phase(current: str) -> str:
    """Return the phase after ``current``; the terminal phase is its own successor."""
    idx = phase_index(current)
    return PHASES[min(idx + 1, len(PHASES) - 1)]


def ensure_forward(current: str, target: str) -> None:
    """Reject a transition from ``current`` to an earlier phase.

    Raises:
        InvalidPhaseError: If ``target`` is unknown or lies behind ``current``.
    """
    target_idx = phase_index(target)
    current_idx = phase_index(current)
    if target_idx < current_idx:
        allowed = ", ".join(PHASES[current_idx:])
        raise InvalidPhaseError(
            f"Invalid transition {current!r} -> {target!r}: not allowed. Allowed next: {allowed}.",
            context={"from": current, "to": target},
        )


__all__ = [
    "SETTINGS_CHECK",
    "PARALLEL_SCAN",
    "SYNTHESIS",
    "REPORT_GENERATION",
    "COMPLETE",
    "PHASES",
    "INITIAL_PHASE",
    "TERMINAL_PHASE",
    "phase_index",
    "next_phase",
    "ensure_forward",
]
