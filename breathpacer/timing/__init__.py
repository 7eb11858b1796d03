"""Timing engine: phase calculation, events, scheduling and the session timer."""

from .events import Subscription, TimerEvent, TimerEventEmitter, TimerEventType
from .phase import PhaseSnapshot, compute_phase, cycles_completed, phase_boundaries, phase_for
from .scheduler import QtTickHandle, QtTickScheduler, TickHandle, TickScheduler
from .timer import SessionTimer, TimerState, TimerStatus
from .watchers import PhaseChangeWatcher, SessionRecord, SessionRecorder

__all__ = [
    "PhaseSnapshot",
    "compute_phase",
    "phase_for",
    "phase_boundaries",
    "cycles_completed",
    "TimerEventType",
    "TimerEvent",
    "TimerEventEmitter",
    "Subscription",
    "TickHandle",
    "TickScheduler",
    "QtTickHandle",
    "QtTickScheduler",
    "SessionTimer",
    "TimerState",
    "TimerStatus",
    "PhaseChangeWatcher",
    "SessionRecord",
    "SessionRecorder",
]
