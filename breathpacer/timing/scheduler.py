"""Tick scheduling for SessionTimer.

The timer only needs "call this once after N seconds, and let me cancel
it". Keeping that behind a small protocol lets the timer run on the Qt event
loop in the app and on a hand-driven scheduler in tests.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from PyQt6.QtCore import QObject, Qt, QTimer


class TickHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TickHandle: ...


class QtTickHandle:
    """A single-shot QTimer; cancelling twice is harmless."""

    def __init__(self, timer: QTimer):
        self._timer: Optional[QTimer] = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    def _fired(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.deleteLater()


class QtTickScheduler:
    """Schedules ticks on the running Qt event loop.

    Requires a QCoreApplication (or QApplication) in the calling thread.
    Timers are parented so Qt, not the Python wrapper, owns them until
    deleteLater() runs.
    """

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent if parent is not None else QObject()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> QtTickHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        handle = QtTickHandle(timer)

        def _on_timeout() -> None:
            handle._fired()
            callback()

        timer.timeout.connect(_on_timeout)
        timer.start(max(0, int(round(delay_s * 1000))))
        return handle
