"""Timer event system.

Provides the event names, the event payload wrapper and the per-timer
listener table. Each event name owns an ordered subscriber list; every
registration gets its own Subscription handle, so removal never depends on
identity lookups in a shared set.

Usage:
    emitter = TimerEventEmitter(reporter)
    sub = emitter.subscribe(TimerEventType.UPDATE, lambda evt: print(evt.data))
    emitter.emit(TimerEvent(TimerEventType.UPDATE, data={"current_time": 1}))
    sub.unsubscribe()
"""

from __future__ import annotations

import functools
import itertools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from ..errors import ListenerError
from ..reporting import ErrorReporter, ErrorSeverity

logger = logging.getLogger(__name__)


class TimerEventType(str, Enum):
    """Events emitted by SessionTimer (values are the public event names)."""

    START = "start"
    UPDATE = "update"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    RESET = "reset"
    CYCLE_COMPLETE = "cycleComplete"

    @classmethod
    def parse(cls, value: Union[TimerEventType, str]) -> TimerEventType:
        """Accept an enum member, its value (``"cycleComplete"``) or its name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            try:
                return cls[str(value).upper()]
            except KeyError:
                raise ValueError(f"Unknown timer event '{value}'") from None


@dataclass
class TimerEvent:
    """A timer event with its payload.

    Attributes:
        event_type: Which transition produced the event
        data: Payload dict (see SessionTimer for the keys per event)
        timestamp: Wall-clock time, set by the emitter when missing
    """
    event_type: TimerEventType
    data: Optional[dict[str, Any]] = None
    timestamp: Optional[float] = None

    @property
    def name(self) -> str:
        return self.event_type.value

    def __str__(self) -> str:
        if self.data:
            data_str = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"TimerEvent({self.event_type.value}, {data_str})"
        return f"TimerEvent({self.event_type.value})"


Listener = Callable[[TimerEvent], None]


def describe_listener(listener: Callable[..., Any]) -> str:
    """Compact, stable name for a listener (used in error reports)."""
    target = listener.func if isinstance(listener, functools.partial) else listener
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    if not isinstance(name, str) or not name:
        name = type(target).__qualname__
    if len(name) > 96:
        name = name[:96] + "…"
    return name


class Subscription:
    """Handle returned by ``subscribe``; unsubscribing is idempotent."""

    __slots__ = ("_emitter", "event_type", "listener", "token")

    def __init__(self, emitter: TimerEventEmitter, event_type: TimerEventType, listener: Listener, token: int):
        self._emitter: Optional[TimerEventEmitter] = emitter
        self.event_type = event_type
        self.listener = listener
        self.token = token

    @property
    def active(self) -> bool:
        return self._emitter is not None

    def unsubscribe(self) -> None:
        emitter, self._emitter = self._emitter, None
        if emitter is not None:
            emitter._remove_token(self.event_type, self.token)

    __call__ = unsubscribe

    def _detach(self) -> None:
        self._emitter = None

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"<Subscription {self.event_type.value} {describe_listener(self.listener)} {state}>"


class TimerEventEmitter:
    """Ordered listener table for one timer.

    Listener failures are wrapped in ListenerError and handed to the error
    reporter; they never reach the emitter's caller and never stop the
    remaining listeners.
    """

    def __init__(self, reporter: Optional[ErrorReporter] = None):
        self._subscribers: dict[TimerEventType, list[Subscription]] = {}
        self._tokens = itertools.count(1)
        self._reporter = reporter

    def subscribe(self, event_type: Union[TimerEventType, str], listener: Listener) -> Subscription:
        """
        Register a listener for one event.

        Args:
            event_type: Event to listen for (enum or public name)
            listener: Callable receiving the TimerEvent

        Returns:
            Subscription handle
        """
        if not callable(listener):
            raise TypeError(f"Listener must be callable, got {type(listener).__name__}")
        kind = TimerEventType.parse(event_type)
        sub = Subscription(self, kind, listener, next(self._tokens))
        # Rebind instead of mutating so an in-flight emit keeps its snapshot
        self._subscribers[kind] = [*self._subscribers.get(kind, []), sub]
        logger.debug(f"[events] Subscribed to {kind.value} (total={len(self._subscribers[kind])})")
        return sub

    def unsubscribe(self, event_type: Union[TimerEventType, str], listener: Listener) -> int:
        """Remove every registration of ``listener`` for the event; returns how many."""
        kind = TimerEventType.parse(event_type)
        subs = self._subscribers.get(kind, [])
        removed = [s for s in subs if s.listener == listener]
        for sub in removed:
            sub.unsubscribe()
        return len(removed)

    def _remove_token(self, kind: TimerEventType, token: int) -> None:
        subs = self._subscribers.get(kind)
        if not subs:
            return
        remaining = [s for s in subs if s.token != token]
        if remaining:
            self._subscribers[kind] = remaining
        else:
            del self._subscribers[kind]
        logger.debug(f"[events] Unsubscribed from {kind.value} (total={len(remaining)})")

    def listener_count(self, event_type: Union[TimerEventType, str, None] = None) -> int:
        if event_type is None:
            return sum(len(subs) for subs in self._subscribers.values())
        return len(self._subscribers.get(TimerEventType.parse(event_type), []))

    def emit(self, event: TimerEvent) -> None:
        """Deliver an event to its listeners in subscription order."""
        if event.timestamp is None:
            event.timestamp = time.time()

        subs = self._subscribers.get(event.event_type)
        if not subs:
            return
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.listener(event)
            except Exception as exc:
                error = ListenerError(event.event_type.value, describe_listener(sub.listener), exc)
                if self._reporter is not None:
                    self._reporter.report(error, ErrorSeverity.MEDIUM)
                else:
                    logger.error(f"[events] {error}", exc_info=True)

    def clear_all(self) -> None:
        """Remove all listeners; outstanding handles become inactive."""
        for subs in self._subscribers.values():
            for sub in subs:
                sub._detach()
        self._subscribers.clear()
        logger.debug("[events] Cleared all subscribers")
