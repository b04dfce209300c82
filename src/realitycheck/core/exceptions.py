from __future__ import annotations

from typing import Any, Dict, Mapping


class RealityCheckError(Exception):
    """Base exception for Reality Check."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Copy; the caller keeps ownership of its mapping.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class InvalidPhaseError(RealityCheckError, ValueError):
    """Raised when a phase name is unknown or lies behind the current phase."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RealityCheckError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnknownCategoryError(RealityCheckError, ValueError):
    """Raised when findings are appended to a category that does not exist."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RealityCheckError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnknownProducerError(RealityCheckError, ValueError):
    """Raised when a result is recorded for an unknown producer identifier."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RealityCheckError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class PersistenceError(RealityCheckError, OSError):
    """Raised when the state or settings document cannot be read or written."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        RealityCheckError.__init__(self, message, context=context)
        OSError.__init__(self, message)


class ProducerError(RealityCheckError, RuntimeError):
    """Raised by a producer adapter when it cannot produce a result."""

    def __init__(
        self,
        message: str,
        *,
        producer_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if producer_id:
            ctx["producer"] = producer_id
        RealityCheckError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)


class ScanFailedError(RealityCheckError):
    """Raised when a scan run aborts in one of its phases."""

    def __init__(
        self,
        message: str,
        *,
        phase: str | None = None,
        scan_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if phase:
            ctx["phase"] = phase
        if scan_id:
            ctx["scan_id"] = scan_id
        ctx.setdefault("retryable", True)
        super().__init__(message, context=ctx)
        self.phase = phase


__all__ = [
    "RealityCheckError",
    "InvalidPhaseError",
    "UnknownCategoryError",
    "UnknownProducerError",
    "PersistenceError",
    "ProducerError",
    "ScanFailedError",
]
