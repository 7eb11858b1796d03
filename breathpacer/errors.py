"""Error taxonomy for the breathing engine.

Every error carries a stable ``code`` and a ``context`` dict so the error
reporter can group and serialize them without inspecting types.
"""

from __future__ import annotations

import time
from typing import Any, Optional


class BreathpacerError(Exception):
    """Base class for all engine errors."""

    code = "BREATHPACER_ERROR"

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})
        self.timestamp = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict (for logs and reporters)."""
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp,
        }


class ConfigurationError(BreathpacerError):
    """Timer used without a technique, or with an invalid one."""

    code = "CONFIGURATION_ERROR"


class TimerDisposedError(ConfigurationError):
    """A disposed SessionTimer was used again."""

    code = "TIMER_DISPOSED"


class ValidationError(BreathpacerError):
    """A technique definition violates a structural invariant."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        context: Optional[dict[str, Any]] = None,
    ):
        merged = {"field": field, "value": value}
        merged.update(context or {})
        super().__init__(message, merged)
        self.field = field
        self.value = value


class NotFoundError(BreathpacerError, LookupError):
    """Lookup of an unregistered technique id."""

    code = "NOT_FOUND"

    def __init__(self, technique_id: str):
        super().__init__(f"Technique '{technique_id}' not found", {"technique_id": technique_id})
        self.technique_id = technique_id


class ListenerError(BreathpacerError):
    """An event listener raised during dispatch.

    Never re-raised: the dispatcher hands it to the error reporter.
    """

    code = "LISTENER_ERROR"

    def __init__(self, event_name: str, listener_name: str, original: BaseException):
        super().__init__(
            f"Listener {listener_name} failed on '{event_name}': {original}",
            {
                "event": event_name,
                "listener": listener_name,
                "original_type": type(original).__name__,
            },
        )
        self.event_name = event_name
        self.listener_name = listener_name
        self.original = original
