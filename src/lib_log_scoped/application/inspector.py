"""Read-only configuration queries backing the operator CLI.

Purpose
-------
Explain, without emitting anything, which level applies to a scope on a
channel, which configured key matched, and which severities would pass.

Contents
--------
* :class:`ScopeRow` - one row of a scope listing.
* :class:`ChannelVerdict` - per-channel outcome for one scope and level.
* :class:`ScopeInspector` - the query object.

System Role
-----------
Used by :mod:`lib_log_scoped.cli`; reuses the
:class:`~lib_log_scoped.application.admission.AdmissionEngine` lookups so the
tooling and the loggers cannot disagree about pattern precedence.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from lib_log_scoped.domain.config import Configuration
from lib_log_scoped.domain.levels import LogLevel, coerce_level
from lib_log_scoped.domain.patterns import PatternCacheStats, is_pattern
from lib_log_scoped.domain.scope_level import ConcreteLevel, format_scope_level, resolve_scope_level

from .admission import AdmissionEngine

SortKey = Literal["name", "level"]


@dataclass(frozen=True, slots=True)
class ScopeRow:
    """One configured key with its evaluated level.

    ``source`` is ``"global"`` or ``"channel"`` for effective listings and
    ``None`` for listings of a single map.
    """

    scope: str
    level: ConcreteLevel
    is_pattern: bool
    source: str | None = None

    @property
    def level_label(self) -> str:
        return format_scope_level(self.level)


@dataclass(frozen=True, slots=True)
class ChannelVerdict:
    """Effective level and verdict of one scope on one channel (``None`` = global)."""

    channel: str | None
    level: ConcreteLevel
    logs: bool


class ScopeInspector:
    """Answer "what would happen" questions about a configuration.

    Examples
    --------
    >>> config = Configuration.from_mapping({
    ...     "scopes": {"payment.*": "warning"},
    ...     "channel_scopes": {"slack": {"payment.*": "error"}},
    ... })
    >>> inspector = ScopeInspector(config)
    >>> inspector.level_for("payment.stripe").severity, inspector.level_for("payment.stripe", "slack").severity
    ('warning', 'error')
    >>> inspector.is_channel_override("payment.stripe", "slack")
    True
    >>> inspector.level_for("auth") is None
    True
    """

    def __init__(self, config: Configuration) -> None:
        self._config = config
        self._engines: dict[str | None, AdmissionEngine] = {}

    @property
    def config(self) -> Configuration:
        return self._config

    def effective_scopes(self, channel: str | None = None) -> Mapping[str, Any]:
        """Return the global map, or the global map overlaid with ``channel``."""

        return self._engine(channel).scopes

    def matched_pattern(self, scope: str, channel: str | None = None) -> str | None:
        """Return the configured key applying to ``scope`` (itself on exact match)."""

        engine = self._engine(channel)
        if scope in engine.scopes:
            return scope
        return engine.matcher.find_match(scope)

    def level_for(self, scope: str, channel: str | None = None) -> ConcreteLevel | None:
        """Return the configured level for ``scope`` or ``None`` when unconfigured.

        Dynamic rules are evaluated on every call.
        """

        key = self.matched_pattern(scope, channel)
        if key is None:
            return None
        return resolve_scope_level(self._engine(channel).scopes[key], f"scopes.{key}")

    def effective_level(self, scope: str, channel: str | None = None) -> ConcreteLevel:
        """Return :meth:`level_for` falling back to the default level."""

        level = self.level_for(scope, channel)
        return self._config.default_log_level if level is None else level

    def is_channel_override(self, scope: str, channel: str | None) -> bool:
        """Return ``True`` when ``channel``'s overlay decides the level of ``scope``."""

        if channel is None:
            return False
        overlay = self._config.scopes_for_channel(channel)
        if scope in overlay:
            return True
        matched = self.matched_pattern(scope, channel)
        return matched is not None and matched in overlay

    @staticmethod
    def would_log(level: str | LogLevel, configured: ConcreteLevel) -> bool:
        return AdmissionEngine.should_log(coerce_level(level), configured)

    def level_matrix(self, scope: str, channel: str | None = None) -> list[tuple[LogLevel, bool]]:
        """Return ``(level, logs)`` for all eight levels in rank order."""

        configured = self.effective_level(scope, channel)
        return [(level, self.would_log(level, configured)) for level in LogLevel]

    def scope_rows(self, channel: str | None = None, *, sort: SortKey = "name") -> list[ScopeRow]:
        """List the global scopes, or the effective scopes of ``channel`` with their source."""

        if channel is None:
            rows = [ScopeRow(scope, self._evaluate(scope, value), is_pattern(scope)) for scope, value in self._config.scopes.items()]
            return _sort_rows(rows, sort)
        overlay = self._config.scopes_for_channel(channel)
        rows = [
            ScopeRow(scope, self._evaluate(scope, value), is_pattern(scope), "channel" if scope in overlay else "global")
            for scope, value in self.effective_scopes(channel).items()
        ]
        return _sort_rows(rows, sort)

    def channel_rows(self, channel: str, *, sort: SortKey = "name") -> list[ScopeRow]:
        """List only the overlay entries of ``channel``."""

        overlay = self._config.scopes_for_channel(channel)
        rows = [ScopeRow(scope, self._evaluate(scope, value), is_pattern(scope)) for scope, value in overlay.items()]
        return _sort_rows(rows, sort)

    def compare_channels(self, scope: str, level: str | LogLevel) -> list[ChannelVerdict]:
        """Return the global verdict followed by one verdict per overlaid channel."""

        verdicts: list[ChannelVerdict] = []
        for channel in (None, *self._config.channel_scopes):
            configured = self.effective_level(scope, channel)
            verdicts.append(ChannelVerdict(channel, configured, self.would_log(level, configured)))
        return verdicts

    def pattern_cache_stats(self, channel: str | None = None) -> PatternCacheStats:
        return self._engine(channel).matcher.cache_stats()

    def pattern_count(self, channel: str | None = None) -> int:
        return sum(1 for scope in self.effective_scopes(channel) if is_pattern(scope))

    def _engine(self, channel: str | None) -> AdmissionEngine:
        engine = self._engines.get(channel)
        if engine is None:
            engine = AdmissionEngine(self._config, channel)
            self._engines[channel] = engine
        return engine

    @staticmethod
    def _evaluate(scope: str, value: Any) -> ConcreteLevel:
        return resolve_scope_level(value, f"scopes.{scope}")


def _sort_rows(rows: list[ScopeRow], sort: SortKey) -> list[ScopeRow]:
    if sort == "level":
        return sorted(rows, key=lambda row: (_level_rank(row.level), row.scope))
    return sorted(rows, key=lambda row: row.scope)


def _level_rank(level: ConcreteLevel) -> int:
    return level.rank if isinstance(level, LogLevel) else len(LogLevel)


__all__ = ["ChannelVerdict", "ScopeInspector", "ScopeRow", "SortKey"]
