"""Level-filtered logging shared by connections and transports.

Everything logs under the ``conduit`` hierarchy (``conduit.connection``,
``conduit.http``). The package installs only a ``NullHandler``; call
``configure_logging`` from scripts that want output on stderr.
"""

from __future__ import annotations

import logging
from functools import partialmethod
from types import MappingProxyType
from typing import Any, Literal, Mapping, NamedTuple

LogLevel = Literal["trace", "debug", "info", "warn", "error"]

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

ROOT_LOGGER_NAME = "conduit"


class LevelSpec(NamedTuple):
    rank: int
    stdlib: int
    method: str
    """Method name looked up on loggers that have no ``log()``."""


LEVELS: Mapping[LogLevel, LevelSpec] = MappingProxyType(
    {
        "trace": LevelSpec(0, TRACE_LEVEL, "trace"),
        "debug": LevelSpec(1, logging.DEBUG, "debug"),
        "info": LevelSpec(2, logging.INFO, "info"),
        "warn": LevelSpec(3, logging.WARNING, "warn"),
        "error": LevelSpec(4, logging.ERROR, "error"),
    }
)


class BoundLogger:
    """A sink plus a minimum level.

    The sink is usually a ``logging.Logger``; any object with ``debug``,
    ``error`` and friends works too (structlog, loguru adapters). Filtering
    happens here, before the sink sees the record, so one connection can be
    made chattier without touching global logging configuration.
    """

    def __init__(self, logger: Any | None = None, *, level: LogLevel = "info") -> None:
        self._sink = logger or _package_logger()
        self._level = level
        self._threshold = LEVELS[level].rank

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def name(self) -> str:
        return getattr(self._sink, "name", ROOT_LOGGER_NAME)

    def log(self, level: LogLevel, msg: str, *args: Any, exc_info: bool = False) -> None:
        spec = LEVELS[level]
        if spec.rank < self._threshold:
            return
        try:
            if hasattr(self._sink, "log"):
                self._sink.log(spec.stdlib, msg, *args, exc_info=exc_info)
            else:
                method = getattr(self._sink, spec.method, None)
                if callable(method):
                    method(msg, *args)
        except Exception:
            # a failing sink never reaches listener dispatch
            pass

    trace = partialmethod(log, "trace")
    debug = partialmethod(log, "debug")
    info = partialmethod(log, "info")
    warn = partialmethod(log, "warn")
    error = partialmethod(log, "error")

    def exception(self, msg: str, *args: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self.log("error", msg, *args, exc_info=True)

    def child(self, name: str) -> "BoundLogger":
        sink = self._sink.getChild(name) if isinstance(self._sink, logging.Logger) else self._sink
        return BoundLogger(sink, level=self._level)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


def configure_logging(level: LogLevel = "debug") -> logging.Logger:
    """Send ``conduit`` records to stderr, for scripts and demos."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(isinstance(handler, logging.StreamHandler) for handler in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(stream)
    logger.setLevel(LEVELS[level].stdlib)
    return logger


def create_logger(*, logger: Any | None = None, level: LogLevel = "info") -> BoundLogger:
    if isinstance(logger, BoundLogger):
        return logger
    return BoundLogger(logger, level=level)


__all__ = [
    "BoundLogger",
    "LEVELS",
    "LogLevel",
    "TRACE_LEVEL",
    "configure_logging",
    "create_logger",
]
