"""Rich-powered console sink implementing :class:`SinkPort`.

Purpose
-------
Render admitted records on an interactive terminal with level icons and
per-level styles, mainly for local development and the CLI demo paths.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping.
* :class:`RichConsoleSink` - the sink.

System Role
-----------
One of the two thin sinks shipped with the package; hosts with their own
logging backend implement :class:`SinkPort` themselves.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping, MutableMapping

from rich.console import Console

from lib_log_scoped.application.ports.sink import SinkPort
from lib_log_scoped.domain.levels import LogLevel

_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.NOTICE: "blue",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.CRITICAL: "bold red",
    LogLevel.ALERT: "bold magenta",
    LogLevel.EMERGENCY: "bold white on red",
}
# Default Rich styles keyed by level.


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RichConsoleSink(SinkPort):
    """Print records as single styled lines.

    Examples
    --------
    >>> from io import StringIO
    >>> console = Console(file=StringIO(), record=True)
    >>> sink = RichConsoleSink("svc", console=console)
    >>> sink.emit(LogLevel.WARNING, "disk low", {"scope": "storage"})
    >>> text = console.export_text()
    >>> "disk low" in text and "scope=storage" in text
    True
    """

    def __init__(
        self,
        name: str = "lib_log_scoped",
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[LogLevel | str, str] | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._name = name
        self._console = console if console is not None else Console(force_terminal=force_color, no_color=no_color)
        self._no_color = no_color
        self._clock = clock
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged

    @property
    def name(self) -> str:
        return self._name

    @property
    def console(self) -> Console:
        return self._console

    def emit(self, level: LogLevel, message: str, context: Mapping[str, Any]) -> None:
        style = "" if self._no_color else self._style_map.get(level, "")
        self._console.print(self.format_line(level, message, context), style=style, highlight=False, markup=False)

    def format_line(self, level: LogLevel, message: str, context: Mapping[str, Any]) -> str:
        """Return the console line for one record.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> sink = RichConsoleSink("svc", clock=lambda: datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc))
        >>> sink.format_line(LogLevel.INFO, "hello", {"b": 2, "a": 1, "skip": None})
        '2025-09-30T12:00:00+00:00 ℹ     INFO svc - hello a=1 b=2'
        """

        fields = {key: value for key, value in context.items() if value is not None and value != {}}
        context_str = "" if not fields else " " + " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        return f"{self._clock().isoformat()} {level.icon} {level.severity.upper():>8} {self._name} - {message}{context_str}"


__all__ = ["RichConsoleSink"]
