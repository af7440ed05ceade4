"""Sink port describing where admitted records are written.

Purpose
-------
Define the single capability the scoped logger needs from the underlying
logging backend: ``emit(level, message, context)``.

Contents
--------
* :class:`SinkPort` - runtime-checkable protocol.

System Role
-----------
Keeps the admission logic independent of the concrete backend (stdlib
:mod:`logging`, Rich console, or a host framework's logger). Operations the
scoped logger does not recognise are forwarded to the sink untouched.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from lib_log_scoped.domain.levels import LogLevel


@runtime_checkable
class SinkPort(Protocol):
    """Write one log record to the underlying backend."""

    def emit(self, level: LogLevel, message: str, context: Mapping[str, Any]) -> None:
        """Forward ``message`` at ``level`` with the decorated ``context``."""


__all__ = ["SinkPort"]
