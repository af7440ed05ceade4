"""Sink forwarding admitted records to a stdlib :class:`logging.Logger`.

The record context travels in ``extra={"context": ...}`` so formatters and
handlers can reach it as ``record.context``. The three levels the stdlib
lacks (``NOTICE``, ``ALERT``, ``EMERGENCY``) are registered by name.
``filename``, ``lineno`` and ``funcName`` name the application caller, not
the frames of this package.
"""

from __future__ import annotations

import logging
import sys
from types import FrameType
from typing import Any, Mapping

from lib_log_scoped.application.ports.frames import is_package_module
from lib_log_scoped.application.ports.sink import SinkPort
from lib_log_scoped.domain.levels import LogLevel

CONTEXT_ATTRIBUTE = "context"

_EXTRA_LEVEL_NAMES = (LogLevel.NOTICE, LogLevel.ALERT, LogLevel.EMERGENCY)


def register_level_names() -> None:
    """Teach :mod:`logging` the names of the non-standard levels.

    Examples
    --------
    >>> register_level_names()
    >>> logging.getLevelName(LogLevel.NOTICE.to_python_level())
    'NOTICE'
    """

    for level in _EXTRA_LEVEL_NAMES:
        logging.addLevelName(level.to_python_level(), level.name)


def _caller_stacklevel() -> int:
    """Return the ``stacklevel`` that credits records to the first caller outside this package."""

    depth = 0
    frame: FrameType | None = sys._getframe(1)
    while frame is not None and is_package_module(frame.f_globals.get("__name__", "")):
        depth += 1
        frame = frame.f_back
    return depth + 1


class StdlibLoggingSink(SinkPort):
    """Emit records through ``logger`` (a name or a :class:`logging.Logger`).

    Attributes not defined here (``setLevel``, ``handlers``, ``isEnabledFor``,
    ...) are forwarded to the wrapped logger.
    """

    def __init__(self, logger: logging.Logger | str | None = None) -> None:
        register_level_names()
        self._logger = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def emit(self, level: LogLevel, message: str, context: Mapping[str, Any]) -> None:
        self._logger.log(
            level.to_python_level(),
            message,
            extra={CONTEXT_ATTRIBUTE: dict(context)},
            stacklevel=_caller_stacklevel(),
        )

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._logger, name)


__all__ = ["CONTEXT_ATTRIBUTE", "StdlibLoggingSink", "register_level_names"]
