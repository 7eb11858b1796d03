"""Engine settings.

Settings come from keyword arguments or from ``BREATHPACER_*`` environment
variables. Unparseable values fall back to the default and log a warning
rather than aborting startup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from .geometry import DEFAULT_PADDING, DEFAULT_SIZE
from .logging_utils import PACKAGE_LOGGER, LogMode, setup_logging
from .platform_paths import get_techniques_path
from .reporting import DEFAULT_MAX_HISTORY

logger = logging.getLogger(__name__)

ENV_PREFIX = "BREATHPACER_"

T = TypeVar("T")


@dataclass
class EngineSettings:
    """
    Runtime settings for an EngineContext.

    Attributes:
        log_level: Level name passed to setup_logging
        log_mode: quiet / normal / debug preset
        log_file: Rotating log file path (None = per-user default)
        techniques_file: Custom techniques JSON loaded on startup if present
        error_history: Max reports kept by the ErrorReporter
        canvas_size: Geometry canvas edge length
        canvas_padding: Geometry inset from the canvas edge
    """
    log_level: str = "INFO"
    log_mode: LogMode = LogMode.NORMAL
    log_file: Optional[Path] = None
    techniques_file: Path = field(default_factory=get_techniques_path)
    error_history: int = DEFAULT_MAX_HISTORY
    canvas_size: int = DEFAULT_SIZE
    canvas_padding: int = DEFAULT_PADDING

    def validate(self) -> tuple[bool, str]:
        """Validate settings. Returns (is_valid, error_message)."""
        if self.error_history < 1:
            return False, f"error_history must be >= 1, got {self.error_history}"
        if self.canvas_size <= 0:
            return False, f"canvas_size must be positive, got {self.canvas_size}"
        if self.canvas_padding < 0 or self.canvas_padding * 2 >= self.canvas_size:
            return False, f"canvas_padding {self.canvas_padding} does not fit canvas_size {self.canvas_size}"
        if self.log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return False, f"Unknown log level '{self.log_level}'"
        return True, ""

    def apply_logging(self, *, add_console: bool = True) -> logging.Logger:
        """Configure the ``breathpacer`` package logger, leaving the root logger alone."""
        return setup_logging(
            logger_name=PACKAGE_LOGGER,
            level=self.log_level,
            log_file=self.log_file,
            log_mode=self.log_mode,
            add_console=add_console,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from ``BREATHPACER_*`` variables (default: os.environ)."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def read(name: str, parse: Callable[[str], T], default: T) -> T:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return parse(raw.strip())
            except ValueError:
                logger.warning(f"[settings] Ignoring invalid {ENV_PREFIX}{name}={raw!r}; using {default!r}")
                return default

        settings = cls(
            log_level=read("LOG_LEVEL", _parse_level, defaults.log_level),
            log_mode=read("LOG_MODE", lambda raw: LogMode(raw.lower()), defaults.log_mode),
            log_file=read("LOG_FILE", Path, defaults.log_file),
            techniques_file=read("TECHNIQUES_FILE", Path, defaults.techniques_file),
            error_history=read("ERROR_HISTORY", _parse_positive_int, defaults.error_history),
            canvas_size=read("CANVAS_SIZE", _parse_positive_int, defaults.canvas_size),
            canvas_padding=read("CANVAS_PADDING", _parse_non_negative_int, defaults.canvas_padding),
        )

        ok, message = settings.validate()
        if not ok:
            logger.warning(f"[settings] {message}; using default canvas geometry")
            settings.canvas_size = defaults.canvas_size
            settings.canvas_padding = defaults.canvas_padding
        return settings


def _parse_level(raw: str) -> str:
    level = raw.upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"Unknown log level '{raw}'")
    return level


def _parse_positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError(f"Expected a positive integer, got {value}")
    return value


def _parse_non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(f"Expected a non-negative integer, got {value}")
    return value
