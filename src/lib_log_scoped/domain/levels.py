"""Log level abstraction with a fixed eight-step severity order.

Purpose
-------
Offer a domain-specific representation of log severities that mirrors the
syslog-style ladder (``debug`` .. ``emergency``) and exposes the ordering
helpers the admission engine relies on.

Contents
--------
* :class:`LogLevel` enum with rank, conversion helpers, and presentation metadata.
* :func:`meets_threshold` - the single comparison used to gate records.
* :func:`coerce_level` - normalise enum/string inputs.
* ``_ICON_TABLE`` / ``_PYTHON_LEVELS`` constants.

System Role
-----------
Shared by every layer: configuration validation checks names against it, the
admission engine compares ranks, and the sinks translate it for presentation
or for the stdlib :mod:`logging` module.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated severities; the value is the rank (0 = most verbose)."""

    DEBUG = 0
    INFO = 1
    NOTICE = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5
    ALERT = 6
    EMERGENCY = 7

    @property
    def rank(self) -> int:
        """Return the position of the level in the total order."""

        return self.value

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured logging payloads."""

        return self.name.lower()

    @property
    def icon(self) -> str:
        """Return the unicode icon visualizing the level on colored consoles."""

        return _ICON_TABLE[self]

    def to_python_level(self) -> int:
        """Return the :mod:`logging` number matching this level."""

        return _PYTHON_LEVELS[self]

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def names(cls) -> tuple[str, ...]:
        """Return the lowercase names in rank order."""

        return tuple(level.severity for level in cls)


def meets_threshold(candidate: LogLevel, threshold: LogLevel) -> bool:
    """Return ``True`` when ``candidate`` is at least as severe as ``threshold``.

    Examples
    --------
    >>> meets_threshold(LogLevel.ERROR, LogLevel.WARNING)
    True
    >>> meets_threshold(LogLevel.DEBUG, LogLevel.INFO)
    False
    """

    return candidate.rank >= threshold.rank


def coerce_level(level: str | LogLevel) -> LogLevel:
    """Normalise level inputs (string or enum) into :class:`LogLevel`.

    Examples
    --------
    >>> coerce_level("warning") is LogLevel.WARNING
    True
    >>> coerce_level(LogLevel.ERROR) is LogLevel.ERROR
    True
    """

    if isinstance(level, LogLevel):
        return level
    return LogLevel.from_name(level)


_ICON_TABLE = {
    LogLevel.DEBUG: "🐞",
    LogLevel.INFO: "ℹ",
    LogLevel.NOTICE: "✉",
    LogLevel.WARNING: "⚠",
    LogLevel.ERROR: "✖",
    LogLevel.CRITICAL: "☠",
    LogLevel.ALERT: "🚨",
    LogLevel.EMERGENCY: "🔥",
}
# Console glyphs displayed by the Rich sink per log level.

_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: 25,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ALERT: 60,
    LogLevel.EMERGENCY: 70,
}


__all__ = ["LogLevel", "coerce_level", "meets_threshold"]
