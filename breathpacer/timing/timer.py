"""
Session Timer - drives a breathing technique against the wall clock.

The SessionTimer owns:
- State machine (IDLE, RUNNING, PAUSED)
- One pending tick at a time, scheduled on an injected TickScheduler
- Phase recomputation through the pure phase calculator
- Event emission to independent listeners (render, audio, haptics, analytics)

Timing model:
    reference_start = clock() - current_time_sec        (on start/resume)
    next tick due   = reference_start + current_time_sec + 1

Every tick is scheduled against the reference point rather than "one
second after the previous tick", so scheduler latency never accumulates.
Pausing stores how far past the reference we were; resuming re-anchors the
reference so the next tick lands where the paused one would have.

Lifecycle notes:
    stop()  returns to IDLE but keeps current_time_sec and the phase, so a
            later start() continues from where it stopped.
    reset() also zeroes the time and recomputes the phase for elapsed 0.
    dispose() stops, drops listeners and the technique; any further call
            except get_state()/dispose() raises TimerDisposedError.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional, Union

from ..errors import ConfigurationError, TimerDisposedError
from ..logging_utils import BurstSampler
from ..reporting import ErrorReporter
from ..techniques.definition import TechniqueDefinition
from ..techniques.validation import validate_technique
from .events import Listener, Subscription, TimerEvent, TimerEventEmitter, TimerEventType
from .phase import PhaseSnapshot, cycles_completed, phase_for
from .scheduler import QtTickHandle, QtTickScheduler, TickHandle, TickScheduler

logger = logging.getLogger(__name__)


class TimerStatus(Enum):
    """Timer execution states."""
    IDLE = auto()      # Not ticking; initial state and the target of stop/reset
    RUNNING = auto()   # Ticking once per second
    PAUSED = auto()    # Tick cancelled, progress kept for resume


@dataclass(frozen=True)
class TimerState:
    """Read-only snapshot returned by ``SessionTimer.get_state()``."""
    status: TimerStatus
    is_running: bool
    is_paused: bool
    current_time_sec: int
    total_duration_sec: int
    current_phase: Optional[PhaseSnapshot]
    phase_index: int
    time_in_phase: int
    time_left: int
    cycles_completed: int
    technique_id: Optional[str]


class SessionTimer:
    """
    Cooperative one-second timer over a TechniqueDefinition.

    Usage:
        timer = SessionTimer(reporter=reporter)
        timer.set_technique(registry.create_technique("478"))
        timer.add_listener("update", on_update)
        timer.start()           # ticks on the Qt event loop

    Events (payload keys):
        start, update, pause, resume, stop, reset:
            current_time, total_duration, current_phase, phase_index,
            time_in_phase, time_left
        cycleComplete:
            current_time, total_duration, cycles_completed
    """

    TICK_SECONDS = 1

    def __init__(
        self,
        technique: Optional[TechniqueDefinition] = None,
        *,
        scheduler: Optional[TickScheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        reporter: Optional[ErrorReporter] = None,
    ):
        """
        Initialize the timer.

        Args:
            technique: Optional technique to assign immediately
            scheduler: Tick scheduler (default: QtTickScheduler on the current loop)
            clock: Monotonic seconds source used for drift-free scheduling
            reporter: Receives listener failures as ListenerError
        """
        self._scheduler: TickScheduler = scheduler if scheduler is not None else QtTickScheduler()
        self._clock = clock
        self._events = TimerEventEmitter(reporter)

        self._status = TimerStatus.IDLE
        self._technique: Optional[TechniqueDefinition] = None
        self._total_duration = 0
        self._current_time = 0
        self._current_phase: Optional[PhaseSnapshot] = None
        self._phase_index = 0
        self._time_in_phase = 0
        self._time_left = 0

        # Drift-free bookkeeping
        self._reference_start: Optional[float] = None
        self._paused_accumulated = 0.0

        # Bumped on every cancellation; a tick from an older generation is ignored
        self._generation = 0
        self._tick_handle: Optional[Union[TickHandle, QtTickHandle]] = None

        self._tick_sampler = BurstSampler(interval_s=30.0, clock=clock)
        self._disposed = False

        if technique is not None:
            self.set_technique(technique)

    # ===== Queries =====

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        """True while a session is active (running or paused)."""
        return self._status is not TimerStatus.IDLE

    @property
    def is_paused(self) -> bool:
        return self._status is TimerStatus.PAUSED

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def technique(self) -> Optional[TechniqueDefinition]:
        return self._technique

    def get_state(self) -> TimerState:
        """Snapshot of the timer state; never the live object."""
        return TimerState(
            status=self._status,
            is_running=self.is_running,
            is_paused=self.is_paused,
            current_time_sec=self._current_time,
            total_duration_sec=self._total_duration,
            current_phase=self._current_phase,
            phase_index=self._phase_index,
            time_in_phase=self._time_in_phase,
            time_left=self._time_left,
            cycles_completed=cycles_completed(self._current_time, self._total_duration),
            technique_id=self._technique.id if self._technique is not None else None,
        )

    def get_current_phase(self) -> Optional[PhaseSnapshot]:
        return self._current_phase

    def get_elapsed_time(self) -> int:
        return self._current_time

    def get_remaining_time(self) -> int:
        """Seconds left in the current cycle."""
        if self._total_duration <= 0:
            return 0
        return self._total_duration - (self._current_time % self._total_duration)

    def get_progress(self) -> float:
        """Progress through the first cycle as a percentage (capped at 100)."""
        if self._total_duration <= 0:
            return 0.0
        return min(100.0, self._current_time / self._total_duration * 100.0)

    def get_cycles_completed(self) -> int:
        return cycles_completed(self._current_time, self._total_duration)

    def get_capabilities(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "is_paused": self.is_paused,
            "has_technique": self._technique is not None,
            "technique_id": self._technique.id if self._technique is not None else None,
            "total_duration": self._total_duration,
            "current_time": self._current_time,
            "listener_count": self._events.listener_count(),
        }

    # ===== Listeners =====

    def add_listener(self, event: Union[TimerEventType, str], callback: Listener) -> Subscription:
        """
        Subscribe to a timer event.

        Args:
            event: Event name ("update", "cycleComplete", ...) or TimerEventType
            callback: Called with a TimerEvent

        Returns:
            Subscription; call it (or ``.unsubscribe()``) to remove the listener
        """
        self._ensure_alive()
        return self._events.subscribe(event, callback)

    def remove_listener(self, event: Union[TimerEventType, str], callback: Listener) -> None:
        """Remove every registration of ``callback`` for ``event`` (idempotent)."""
        self._ensure_alive()
        self._events.unsubscribe(event, callback)

    # ===== Control =====

    def set_technique(self, technique: TechniqueDefinition) -> None:
        """
        Assign a technique and reset the timer.

        Raises:
            ConfigurationError: If technique is None or fails validation
        """
        self._ensure_alive()
        if technique is None:
            raise ConfigurationError("Cannot set technique: technique is None")
        report = validate_technique(technique)
        if not report.is_valid:
            issue = report.first_error()
            raise ConfigurationError(
                f"Invalid technique: {issue.message}",
                {"field": issue.field, "technique_id": getattr(technique, "id", None)},
            )

        self._technique = technique
        self._total_duration = technique.total_duration_sec
        logger.info(f"[timer] Technique set: {technique.id} ({technique.pattern}, {self._total_duration}s cycle)")
        self.reset()

    def start(self) -> None:
        """
        Start ticking from ``current_time_sec``.

        No-op while RUNNING or PAUSED; a paused session continues through
        ``resume()``.

        Raises:
            ConfigurationError: If no technique is assigned
        """
        self._ensure_alive()
        if self._technique is None:
            raise ConfigurationError("Cannot start timer without technique")
        if self._status is not TimerStatus.IDLE:
            return

        self._apply_phase(phase_for(self._current_time, self._technique))
        self._status = TimerStatus.RUNNING
        self._reference_start = self._clock() - self._current_time
        self._paused_accumulated = 0.0
        self._schedule_next_tick()

        logger.info(f"[timer] Started at {self._current_time}s (phase={self._phase_index})")
        payload = self._phase_payload()
        self._emit(TimerEventType.START, payload)
        self._emit(TimerEventType.UPDATE, dict(payload))

    def pause(self) -> None:
        """Cancel the pending tick and remember progress. No-op unless RUNNING."""
        self._ensure_alive()
        if self._status is not TimerStatus.RUNNING:
            return
        self._cancel_tick()
        self._paused_accumulated = self._clock() - self._reference_start
        self._status = TimerStatus.PAUSED
        logger.info(f"[timer] Paused at {self._current_time}s")
        self._emit(TimerEventType.PAUSE, self._phase_payload())

    def resume(self) -> None:
        """Continue from the paused position. No-op unless PAUSED."""
        self._ensure_alive()
        if self._status is not TimerStatus.PAUSED:
            return
        self._reference_start = self._clock() - self._paused_accumulated
        self._status = TimerStatus.RUNNING
        self._schedule_next_tick()
        logger.info(f"[timer] Resumed at {self._current_time}s")
        self._emit(TimerEventType.RESUME, self._phase_payload())

    def stop(self) -> None:
        """Return to IDLE keeping time and phase. No-op when already IDLE."""
        self._ensure_alive()
        if self._status is TimerStatus.IDLE:
            return
        self._cancel_tick()
        self._status = TimerStatus.IDLE
        self._reference_start = None
        ticks = self._tick_sampler.flush()
        logger.info(f"[timer] Stopped at {self._current_time}s ({ticks} ticks since last summary)")
        self._emit(TimerEventType.STOP, self._phase_payload())

    def reset(self) -> None:
        """Stop (if active) and rewind to elapsed 0. Always emits ``reset``."""
        self._ensure_alive()
        self.stop()
        self._cancel_tick()
        self._current_time = 0
        self._phase_index = 0
        self._time_in_phase = 0
        self._time_left = 0
        self._paused_accumulated = 0.0
        self._reference_start = None
        self._current_phase = None
        if self._technique is not None:
            self._apply_phase(phase_for(0, self._technique))
        logger.debug("[timer] Reset")
        self._emit(TimerEventType.RESET, self._phase_payload())

    def dispose(self) -> None:
        """Stop, release listeners and technique. Safe to call twice."""
        if self._disposed:
            return
        self.stop()
        self._events.clear_all()
        self._technique = None
        self._disposed = True
        logger.debug("[timer] Disposed")

    # ===== Ticking =====

    def _schedule_next_tick(self) -> None:
        due = self._reference_start + self._current_time + self.TICK_SECONDS
        delay = max(0.0, due - self._clock())
        generation = self._generation
        self._tick_handle = self._scheduler.call_later(delay, lambda: self._on_tick(generation))

    def _cancel_tick(self) -> None:
        self._generation += 1
        handle, self._tick_handle = self._tick_handle, None
        if handle is not None:
            handle.cancel()

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self._status is not TimerStatus.RUNNING:
            return
        self._tick_handle = None
        self._advance()
        # A listener may have paused/stopped/reset during the update
        if generation == self._generation and self._status is TimerStatus.RUNNING:
            self._schedule_next_tick()

    def _advance(self) -> None:
        self._current_time += self.TICK_SECONDS
        self._apply_phase(phase_for(self._current_time, self._technique))

        burst = self._tick_sampler.record()
        if burst is not None:
            logger.debug(f"[timer] {burst} ticks (t={self._current_time}s, phase={self._phase_index})")

        self._emit(TimerEventType.UPDATE, self._phase_payload())

        if self._current_time > 0 and self._current_time % self._total_duration == 0:
            completed = self._current_time // self._total_duration
            logger.debug(f"[timer] Cycle {completed} complete")
            self._emit(TimerEventType.CYCLE_COMPLETE, {
                "current_time": self._current_time,
                "total_duration": self._total_duration,
                "cycles_completed": completed,
            })

    # ===== Helpers =====

    def _apply_phase(self, snapshot: PhaseSnapshot) -> None:
        self._current_phase = snapshot
        self._phase_index = snapshot.phase_index
        self._time_in_phase = snapshot.time_in_phase
        self._time_left = snapshot.time_left

    def _phase_payload(self) -> dict[str, Any]:
        return {
            "current_time": self._current_time,
            "total_duration": self._total_duration,
            "current_phase": self._current_phase,
            "phase_index": self._phase_index,
            "time_in_phase": self._time_in_phase,
            "time_left": self._time_left,
        }

    def _emit(self, event_type: TimerEventType, data: dict[str, Any]) -> None:
        self._events.emit(TimerEvent(event_type, data=data))

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise TimerDisposedError("SessionTimer has been disposed")
