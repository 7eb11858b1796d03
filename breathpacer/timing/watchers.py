"""Timer consumers built on the public listener API.

PhaseChangeWatcher turns the once-per-second ``update`` stream into phase
transitions, which is what audio and vibration cues key on. SessionRecorder
keeps a small log of session milestones for analytics.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .events import Subscription, TimerEvent, TimerEventType
from .phase import PhaseSnapshot
from .timer import SessionTimer

logger = logging.getLogger(__name__)

PhaseChangeCallback = Callable[[Optional[PhaseSnapshot], PhaseSnapshot], None]


class PhaseChangeWatcher:
    """Call ``callback(previous, current)`` when the active phase changes.

    A change is a new phase index or a new cycle (a one-phase technique
    still reports each cycle). The first update after a start or reset
    reports ``previous=None``.
    """

    def __init__(self, timer: SessionTimer, callback: PhaseChangeCallback):
        self._callback = callback
        self._previous: Optional[PhaseSnapshot] = None
        self._previous_cycle: Optional[int] = None
        self._subscriptions: list[Subscription] = [
            timer.add_listener(TimerEventType.UPDATE, self._on_update),
            timer.add_listener(TimerEventType.RESET, self._on_reset),
        ]

    @property
    def current(self) -> Optional[PhaseSnapshot]:
        return self._previous

    def _on_update(self, event: TimerEvent) -> None:
        data = event.data or {}
        current = data.get("current_phase")
        if current is None:
            return
        total = data.get("total_duration") or 0
        cycle = data.get("current_time", 0) // total if total else 0

        previous = self._previous
        changed = (
            previous is None
            or previous.phase_index != current.phase_index
            or self._previous_cycle != cycle
        )
        self._previous = current
        self._previous_cycle = cycle
        if changed:
            self._callback(previous, current)

    def _on_reset(self, event: TimerEvent) -> None:
        self._previous = None
        self._previous_cycle = None

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()


@dataclass
class SessionRecord:
    """One recorded milestone."""
    kind: str
    current_time: int
    timestamp: float = field(default_factory=time.time)
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "current_time": self.current_time,
            "timestamp": self.timestamp,
            "details": dict(self.details),
        }


class SessionRecorder:
    """Records start, stop and cycle completion events of one timer."""

    _EVENTS = (TimerEventType.START, TimerEventType.STOP, TimerEventType.CYCLE_COMPLETE)

    def __init__(self, timer: SessionTimer):
        self._timer = timer
        self.records: list[SessionRecord] = []
        self._subscriptions = [timer.add_listener(kind, self._record) for kind in self._EVENTS]

    def _technique_id(self) -> Optional[str]:
        technique = self._timer.technique
        return technique.id if technique is not None else None

    def _record(self, event: TimerEvent) -> None:
        data = event.data or {}
        details: dict[str, Any] = {"technique_id": self._technique_id()}
        if event.event_type is TimerEventType.CYCLE_COMPLETE:
            details["cycles_completed"] = data.get("cycles_completed", 0)
        self.records.append(SessionRecord(
            kind=event.name,
            current_time=data.get("current_time", 0),
            timestamp=event.timestamp if event.timestamp is not None else time.time(),
            details=details,
        ))

    @property
    def cycles_completed(self) -> int:
        cycles = [r.details["cycles_completed"] for r in self.records if r.kind == TimerEventType.CYCLE_COMPLETE.value]
        return cycles[-1] if cycles else 0

    def summary(self) -> dict[str, Any]:
        return {
            "technique_id": self._technique_id(),
            "sessions": sum(1 for r in self.records if r.kind == TimerEventType.START.value),
            "cycles_completed": self.cycles_completed,
            "records": len(self.records),
        }

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions = []
        logger.debug(f"[recorder] Closed with {len(self.records)} records")
