"""Levelled logging with printf-style messages."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol

_log = logging.getLogger("speak_to_ai")
_log.setLevel(logging.DEBUG)
_handler: logging.Handler | None = None


class LogLevel(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class LoggerConfig:
    level: LogLevel = LogLevel.INFO
    file: str = ""


class Logger(Protocol):
    def debug(self, fmt: str, *args: Any) -> None: ...
    def info(self, fmt: str, *args: Any) -> None: ...
    def warning(self, fmt: str, *args: Any) -> None: ...
    def error(self, fmt: str, *args: Any) -> None: ...


def _format(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError):
        return fmt + " " + " ".join(repr(a) for a in args)


class DefaultLogger:
    """Logger that drops messages below its level."""

    def __init__(self, level: LogLevel = LogLevel.INFO) -> None:
        self.level = LogLevel(level)

    def _emit(self, level: LogLevel, tag: str, fmt: str, args: tuple) -> None:
        if self.level <= level:
            _log.info("[%s] %s", tag, _format(fmt, args))

    def debug(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.DEBUG, "DEBUG", fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.INFO, "INFO", fmt, args)

    def warning(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.WARNING, "WARNING", fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        self._emit(LogLevel.ERROR, "ERROR", fmt, args)


def configure(config: LoggerConfig) -> DefaultLogger:
    """Set up output (stderr or an appended file) and return a logger."""
    global _handler
    if config.file:
        handler: logging.Handler = logging.FileHandler(config.file, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(filename)s:%(lineno)d: %(message)s"))
    if _handler is not None:
        _log.removeHandler(_handler)
        _handler.close()
    _handler = handler
    _log.addHandler(handler)
    return DefaultLogger(config.level)