"""Producer adapters and the scan runner."""
from __future__ import annotations

from .producers import CallableProducer, CommandProducer, FileProducer, Producer
from .runner import (
    PRODUCER_TIMEOUTS,
    ScanOutcome,
    ScanRunner,
    disabled_producers,
    producer_timeout,
)

__all__ = [
    "CallableProducer",
    "CommandProducer",
    "FileProducer",
    "Producer",
    "PRODUCER_TIMEOUTS",
    "ScanOutcome",
    "ScanRunner",
    "disabled_producers",
    "producer_timeout",
]
