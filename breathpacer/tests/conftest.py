"""pytest configuration file."""

import logging
import os

import pytest

# Run Qt headless so the qapp fixture works without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from breathpacer.reporting import ErrorReporter
from breathpacer.techniques import Phase, TechniqueDefinition, TechniqueRegistry
from breathpacer.timing import SessionTimer


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (may take several seconds)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture(autouse=True, scope="session")
def _silence_logs():
    logging.getLogger("breathpacer.timing").setLevel(logging.WARNING)
    logging.getLogger("breathpacer.techniques").setLevel(logging.WARNING)
    yield


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualHandle:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Tick scheduler driven by a FakeClock.

    ``advance(seconds)`` moves the clock forward and fires every pending
    callback that has come due, in due order.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.handles: list[ManualHandle] = []

    def call_later(self, delay_s, callback):
        handle = ManualHandle(self.clock() + delay_s, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if h.active]

    def advance(self, seconds: float) -> None:
        target = self.clock.now + seconds
        while True:
            due = [h for h in self.pending if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.clock.now = max(self.clock.now, handle.due)
            handle.fired = True
            handle.callback()
        self.clock.now = target


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def reporter():
    rep = ErrorReporter()
    yield rep
    rep.close()


@pytest.fixture
def registry():
    return TechniqueRegistry.with_builtins()


@pytest.fixture
def box4(registry):
    return registry.create_technique("box4")


@pytest.fixture
def four_seven_eight(registry):
    return registry.create_technique("478")


@pytest.fixture
def make_technique():
    def _make(durations, technique_id="custom", name="Custom"):
        phases = [Phase(f"p{i}", f"Phase {i + 1}") for i in range(len(durations))]
        return TechniqueDefinition(id=technique_id, name=name, phases=phases, durations_sec=durations)
    return _make


@pytest.fixture
def make_timer(scheduler, clock, reporter):
    timers = []

    def _make(technique=None):
        timer = SessionTimer(technique, scheduler=scheduler, clock=clock, reporter=reporter)
        timers.append(timer)
        return timer

    yield _make
    for timer in timers:
        timer.dispose()
