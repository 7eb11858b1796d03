"""Error reporting collaborator.

The reporter is created once by the engine context and passed to every
component that needs it. It logs each report, keeps a bounded history for
diagnostics and forwards reports to optional sinks (crash reporters or
UI toasts).
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .errors import BreathpacerError

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 100


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass(frozen=True)
class ErrorReport:
    """One reported error with its severity."""

    error: BaseException
    severity: ErrorSeverity

    @property
    def code(self) -> str:
        return getattr(self.error, "code", type(self.error).__name__)

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, BreathpacerError):
            data = self.error.to_dict()
        else:
            data = {"name": type(self.error).__name__, "code": self.code, "message": str(self.error)}
        data["severity"] = self.severity.value
        return data


ErrorSink = Callable[[ErrorReport], None]


class ErrorReporter:
    """Receives errors that must not propagate (e.g. failing listeners)."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        self._history: deque[ErrorReport] = deque(maxlen=max(1, int(max_history)))
        self._sinks: list[ErrorSink] = []

    @property
    def max_history(self) -> int:
        return self._history.maxlen or 0

    def add_sink(self, sink: ErrorSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def remove_sink(self, sink: ErrorSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def report(self, error: BaseException, severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorReport:
        """
        Record an error.

        Args:
            error: The exception to record
            severity: Controls the log level

        Returns:
            The stored ErrorReport
        """
        entry = ErrorReport(error=error, severity=ErrorSeverity(severity))
        self._history.append(entry)

        cause = getattr(error, "original", None) or error
        logger.log(
            _LOG_LEVELS[entry.severity],
            f"[errors] {entry.code}: {error}",
            exc_info=(type(cause), cause, cause.__traceback__) if cause.__traceback__ else None,
        )

        for sink in list(self._sinks):
            try:
                sink(entry)
            except Exception as exc:
                logger.error(f"[errors] Error sink {sink!r} failed: {exc}", exc_info=True)
        return entry

    def history(self, code: Optional[str] = None) -> list[ErrorReport]:
        """Recorded reports, oldest first (optionally filtered by error code)."""
        if code is None:
            return list(self._history)
        return [entry for entry in self._history if entry.code == code]

    def stats(self) -> dict[str, Any]:
        return {
            "total": len(self._history),
            "by_code": dict(Counter(entry.code for entry in self._history)),
            "by_severity": dict(Counter(entry.severity.value for entry in self._history)),
        }

    def clear(self) -> None:
        self._history.clear()

    def close(self) -> None:
        """Drop history and sinks (teardown)."""
        self._history.clear()
        self._sinks.clear()
