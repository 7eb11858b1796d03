"""Logging setup for breathpacer.

The CLI configures the root logger; an embedding application that keeps
its own root handlers can scope breathpacer's output to the package logger
through ``EngineSettings.apply_logging``.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import time
from enum import Enum
from pathlib import Path
from typing import Optional

from .platform_paths import get_user_data_dir


DEFAULT_LOG_FILENAME = "breathpacer.log"
PACKAGE_LOGGER = "breathpacer"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3

_PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"


class LogMode(str, Enum):
    """Verbosity presets: quiet keeps the console at WARNING, debug forces DEBUG."""

    QUIET = "quiet"
    NORMAL = "normal"
    DEBUG = "debug"


_LOG_MODE: LogMode = LogMode.NORMAL


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def get_default_log_dir() -> Path:
    """Per-user log directory, or cwd if it cannot be created."""
    p = get_user_data_dir()
    try:
        p.mkdir(parents=True, exist_ok=True)
        return p
    except OSError:
        return Path.cwd()


def get_default_log_path() -> Path:
    return get_default_log_dir() / DEFAULT_LOG_FILENAME


def set_log_mode(mode: LogMode | str | None) -> LogMode:
    """Record the active preset; unknown names fall back to NORMAL."""
    global _LOG_MODE
    if isinstance(mode, LogMode):
        _LOG_MODE = mode
    else:
        try:
            _LOG_MODE = LogMode(str(mode).lower())
        except ValueError:
            _LOG_MODE = LogMode.NORMAL
    return _LOG_MODE


def get_log_mode() -> LogMode:
    return _LOG_MODE


def _resolve_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def setup_logging(
    *,
    level: str | int = "INFO",
    log_file: Optional[str | Path] = None,
    json_format: bool = False,
    logger_name: Optional[str] = None,
    log_mode: LogMode | str | None = None,
    add_console: bool = True,
) -> logging.Logger:
    """Attach a rotating file handler and a console handler.

    - level: DEBUG/INFO/WARNING/ERROR (name or number)
    - log_file: rotating file path (default: per-user data dir)
    - json_format: one JSON object per line instead of plain text
    - logger_name: logger to configure (default: root)
    - log_mode: quiet/normal/debug preset
    - add_console: also log to stderr

    Calling it again on a configured logger only updates levels.
    """
    resolved_level = _resolve_level(level)
    mode = set_log_mode(log_mode) if log_mode is not None else get_log_mode()
    if mode is LogMode.DEBUG:
        resolved_level = min(resolved_level, logging.DEBUG)
    console_level = max(logging.WARNING, resolved_level) if mode is LogMode.QUIET else resolved_level

    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved_level)

    if logger.handlers:
        for handler in logger.handlers:
            # FileHandler subclasses StreamHandler, so test it first
            if isinstance(handler, logging.FileHandler):
                handler.setLevel(resolved_level)
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(console_level)
            else:
                handler.setLevel(resolved_level)
        return logger

    formatter = JsonLineFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT, _DATE_FORMAT)

    log_path = Path(log_file) if log_file else get_default_log_path()
    file_error: Optional[OSError] = None
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as exc:
        file_error = exc

    if add_console:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if file_error is not None:
        logger.warning(f"[logging] File logging disabled ({log_path}): {file_error}")
    return logger


class BurstSampler:
    """Counts repetitive events and reports them once per window.

    ``record()`` returns the window's count when the interval has elapsed,
    else None. ``flush()`` hands back whatever is pending and restarts the
    window, e.g. when the timer stops mid-window.
    """

    def __init__(self, interval_s: float = 2.0, clock=time.monotonic) -> None:
        self.interval_s = max(0.1, float(interval_s))
        self._clock = clock
        self._window_end = clock() + self.interval_s
        self._count = 0

    def record(self, amount: int = 1) -> Optional[int]:
        self._count += max(0, amount)
        now = self._clock()
        if now < self._window_end:
            return None
        return self._restart(now)

    def flush(self) -> int:
        return self._restart(self._clock())

    def _restart(self, now: float) -> int:
        total, self._count = self._count, 0
        self._window_end = now + self.interval_s
        return total
