"""Engine context.

One EngineContext per application: it owns the error reporter, the
technique registry and every timer it hands out, and tears them down
together.

Usage:
    with create_context() as ctx:
        timer = ctx.new_timer("478")
        timer.start()
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional

from .errors import BreathpacerError, ConfigurationError
from .geometry import MarkerPoint, generate_points
from .reporting import ErrorReporter, ErrorSeverity
from .settings import EngineSettings
from .techniques.registry import TechniqueRegistry
from .timing.scheduler import TickScheduler
from .timing.timer import SessionTimer

logger = logging.getLogger(__name__)


class EngineContext:
    """Explicit owner of the engine's long-lived collaborators."""

    def __init__(
        self,
        settings: EngineSettings,
        reporter: ErrorReporter,
        registry: TechniqueRegistry,
        *,
        scheduler_factory: Optional[Callable[[], TickScheduler]] = None,
    ):
        self.settings = settings
        self.reporter = reporter
        self.registry = registry
        self._scheduler_factory = scheduler_factory
        self._timers: List[SessionTimer] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def timers(self) -> List[SessionTimer]:
        return list(self._timers)

    def new_timer(self, technique_id: Optional[str] = None, **kwargs: Any) -> SessionTimer:
        """
        Create a timer wired to this context's reporter.

        Args:
            technique_id: Registered technique to assign (a private copy)
            **kwargs: Forwarded to SessionTimer (scheduler, clock)

        Raises:
            ConfigurationError: If the context is closed
            NotFoundError: If technique_id is not registered
        """
        if self._closed:
            raise ConfigurationError("EngineContext is closed")
        if "scheduler" not in kwargs and self._scheduler_factory is not None:
            kwargs["scheduler"] = self._scheduler_factory()
        technique = self.registry.create_technique(technique_id) if technique_id is not None else None
        timer = SessionTimer(technique, reporter=self.reporter, **kwargs)
        self._timers.append(timer)
        logger.debug(f"[context] Timer created (technique={technique_id}, total={len(self._timers)})")
        return timer

    def points_for(self, technique_id: str) -> List[MarkerPoint]:
        """Marker geometry for a registered technique using the configured canvas."""
        return generate_points(
            self.registry.get_technique(technique_id),
            size=self.settings.canvas_size,
            padding=self.settings.canvas_padding,
        )

    def close(self) -> None:
        """Dispose every timer and clear the reporter. Safe to call twice."""
        if self._closed:
            return
        for timer in self._timers:
            timer.dispose()
        self._timers.clear()
        self.reporter.close()
        self._closed = True
        logger.debug("[context] Closed")

    def __enter__(self) -> "EngineContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_context(
    settings: Optional[EngineSettings] = None,
    *,
    scheduler_factory: Optional[Callable[[], TickScheduler]] = None,
) -> EngineContext:
    """
    Build a context: reporter, built-in registry and custom techniques.

    A custom techniques file that fails to load is reported (HIGH) and
    skipped; the built-ins stay available.
    """
    settings = settings or EngineSettings.from_env()
    reporter = ErrorReporter(max_history=settings.error_history)
    registry = TechniqueRegistry.with_builtins()

    path = settings.techniques_file
    if path is not None and path.is_file():
        try:
            loaded = registry.load_json(path)
            logger.info(f"[context] Loaded {len(loaded)} custom technique(s) from {path}")
        except BreathpacerError as exc:
            reporter.report(exc, ErrorSeverity.HIGH)
        except (OSError, json.JSONDecodeError) as exc:
            reporter.report(
                ConfigurationError(f"Cannot read techniques file {path}: {exc}", {"path": str(path)}),
                ErrorSeverity.HIGH,
            )

    return EngineContext(settings, reporter, registry, scheduler_factory=scheduler_factory)
