"""Levelled, coloured console logging shared by the whole package."""

from __future__ import annotations

import os
import sys
import threading
from enum import IntEnum
from types import FrameType
from typing import Optional, TextIO


class LogPriority(IntEnum):
    """Log levels; a message is shown when its level is <= the logger's level."""

    CRITICAL = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5


_PREFIXES = {
    LogPriority.TRACE: "[Trace]||",
    LogPriority.DEBUG: "\x1b[33m[Debug]||",
    LogPriority.INFO: "\x1b[32m[Info]||",
    LogPriority.WARNING: "\x1b[93m[Warning]||",
    LogPriority.ERROR: "\x1b[35m[Error]||",
    LogPriority.CRITICAL: "\x1b[31m[Critical]||",
}

_RESET = "\033[0m"


def _format(message: str, args: tuple) -> str:
    if not args:
        return message
    try:
        return message % args
    except (TypeError, ValueError):
        return " ".join([message, *map(str, args)])


def _caller_frame() -> Optional[FrameType]:
    frame = sys._getframe(1)
    while frame is not None and frame.f_code.co_filename == __file__:
        frame = frame.f_back
    return frame


class Logger:
    """Thread-safe logger writing `[Level]||file||function||line||message` lines."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self.priority = LogPriority.TRACE
        self.debugging = False

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def set_priority(self, new_priority: int) -> None:
        """Change the level; values outside the known levels are ignored."""
        try:
            level = LogPriority(new_priority)
        except ValueError:
            return
        self.info("Setting log level to %s", level.name.capitalize())
        self.priority = level

    def debug_enable(self, enable: int) -> None:
        """Switch debug messages on (1) or off (0)."""
        if enable not in (0, 1):
            raise ValueError(f"debug_enable expects 0 or 1, got {enable!r}")
        self.info("%sing debugging", "Enabl" if enable else "Disabl")
        self.debugging = bool(enable)

    def log(self, priority: int, message: str, *args: object) -> None:
        level = LogPriority(priority)
        if level > self.priority:
            return
        frame = _caller_frame()
        if frame is not None:
            location = (
                f"{os.path.basename(frame.f_code.co_filename)}||"
                f"{frame.f_code.co_name}||{frame.f_lineno}||"
            )
        else:
            location = "?||?||0||"
        line = f"{_PREFIXES[level]}{location}{_format(message, args)}{_RESET}\n"
        with self._lock:
            self.stream.write(line)
            self.stream.flush()

    def trace(self, message: str, *args: object) -> None:
        self.log(LogPriority.TRACE, message, *args)

    def debug(self, message: str, *args: object) -> None:
        if self.debugging:
            self.log(LogPriority.DEBUG, message, *args)

    def info(self, message: str, *args: object) -> None:
        self.log(LogPriority.INFO, message, *args)

    def warning(self, message: str, *args: object) -> None:
        self.log(LogPriority.WARNING, message, *args)

    def error(self, message: str, *args: object) -> None:
        self.log(LogPriority.ERROR, message, *args)

    def critical(self, message: str, *args: object) -> None:
        self.log(LogPriority.CRITICAL, message, *args)


_LOGGER = Logger()


def get_logger() -> Logger:
    """Return the process-wide logger."""
    return _LOGGER