"""Level computation and gating for one channel's scope map.

Purpose
-------
Answer the questions the per-call pipeline asks once the scope is known:
is the scope configured, which level applies to it, and does the requested
severity pass.

Contents
--------
* :class:`LevelSource` - where a configured level came from.
* :class:`LevelLookup` - result of a single-scope lookup.
* :class:`AdmissionDecision` - outcome of gating one log call.
* :class:`AdmissionEngine` - the stateless decision object.

System Role
-----------
Built by :class:`~lib_log_scoped.application.scoped_logger.ScopedLogger` and
:class:`~lib_log_scoped.application.inspector.ScopeInspector` from the merged
(channel-overlaid) scope map. The runtime-override table is passed in on
every call so the engine itself never holds per-call or per-logger state.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from lib_log_scoped.domain.config import Configuration
from lib_log_scoped.domain.levels import LogLevel, meets_threshold
from lib_log_scoped.domain.patterns import PatternMatcher
from lib_log_scoped.domain.scope_level import SUPPRESSED, ConcreteLevel, resolve_scope_level

from .scope_resolver import ResolutionMethod

RuntimeLevels = Mapping[str, ConcreteLevel]


class LevelSource(Enum):
    """Origin of the level applied to a scope."""

    RUNTIME = "runtime"
    EXACT = "exact"
    PATTERN = "pattern"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class LevelLookup:
    """Level applied to one scope identifier.

    Attributes
    ----------
    level:
        Concrete :class:`LogLevel` or ``SUPPRESSED``.
    source:
        Which rule produced the level.
    matched_pattern:
        Configured key that matched when the lookup went through the pattern
        matcher, else ``None``.
    runtime_override:
        ``True`` when a runtime override (on the scope or on its matched
        pattern) decided the level.
    """

    level: ConcreteLevel
    source: LevelSource
    matched_pattern: str | None = None
    runtime_override: bool = False


@dataclass(frozen=True, slots=True)
class AdmissionDecision:
    """Outcome of gating one log call."""

    admitted: bool
    effective_level: ConcreteLevel
    scope_label: str | None
    lookup: LevelLookup | None
    resolution: ResolutionMethod
    reason: str


class AdmissionEngine:
    """Decide which level applies to a scope and whether a record passes.

    Examples
    --------
    >>> config = Configuration.from_mapping({"scopes": {"payment.*": "warning", "auth": False}})
    >>> engine = AdmissionEngine(config)
    >>> engine.configured_level("payment.stripe", {}).matched_pattern
    'payment.*'
    >>> engine.most_verbose_level(["payment.stripe", "auth"], {})
    SUPPRESSED
    """

    def __init__(self, config: Configuration, channel: str | None = None) -> None:
        self._config = config
        self._channel = channel
        self._scopes = config.merged_scopes(channel)
        self._matcher = PatternMatcher(self._scopes)

    @property
    def scopes(self) -> Mapping[str, object]:
        """Return the merged scope map this engine decides against."""

        return self._scopes

    @property
    def matcher(self) -> PatternMatcher:
        return self._matcher

    def is_known(self, scope: str, runtime_levels: RuntimeLevels) -> bool:
        """Return ``True`` for runtime overrides, exact keys, and pattern matches."""

        if scope in runtime_levels or scope in self._scopes:
            return True
        return self._matcher.find_match(scope) is not None

    def unknown_scopes(self, scopes: Sequence[str], runtime_levels: RuntimeLevels) -> list[str]:
        """Return the identifiers in ``scopes`` that are not known, in call order."""

        return [scope for scope in scopes if not self.is_known(scope, runtime_levels)]

    def configured_level(self, scope: str | None, runtime_levels: RuntimeLevels) -> LevelLookup:
        """Look up the level for ``scope``: runtime, exact key, pattern, default."""

        if scope is None:
            return LevelLookup(self._config.default_log_level, LevelSource.DEFAULT)
        if scope in runtime_levels:
            return LevelLookup(runtime_levels[scope], LevelSource.RUNTIME, runtime_override=True)
        if scope in self._scopes:
            return LevelLookup(resolve_scope_level(self._scopes[scope], f"scopes.{scope}"), LevelSource.EXACT)
        pattern = self._matcher.find_match(scope)
        if pattern is not None:
            if pattern in runtime_levels:
                return LevelLookup(runtime_levels[pattern], LevelSource.RUNTIME, pattern, runtime_override=True)
            return LevelLookup(resolve_scope_level(self._scopes[pattern], f"scopes.{pattern}"), LevelSource.PATTERN, pattern)
        return LevelLookup(self._config.default_log_level, LevelSource.DEFAULT)

    def most_verbose_level(self, scopes: Sequence[str], runtime_levels: RuntimeLevels) -> ConcreteLevel:
        """Return the most verbose level among ``scopes``; suppression is absorbing.

        An empty sequence yields the default level.
        """

        best: LogLevel | None = None
        for scope in scopes:
            level = self.configured_level(scope, runtime_levels).level
            if not isinstance(level, LogLevel):
                return SUPPRESSED
            if best is None or level.rank < best.rank:
                best = level
        return best if best is not None else self._config.default_log_level

    def decide(
        self,
        requested: LogLevel,
        scopes: Sequence[str],
        resolution: ResolutionMethod,
        runtime_levels: RuntimeLevels,
    ) -> AdmissionDecision:
        """Compute the effective level for a call and gate ``requested`` against it.

        ``scopes`` holds every explicit identifier (multi-scope calls) or the
        single resolved scope; an empty sequence means the default level.
        """

        lookup: LevelLookup | None
        if len(scopes) > 1:
            lookup = None
            effective = self.most_verbose_level(scopes, runtime_levels)
            label: str | None = ", ".join(scopes)
        else:
            label = scopes[0] if scopes else None
            lookup = self.configured_level(label, runtime_levels)
            effective = lookup.level
        if effective is SUPPRESSED:
            return AdmissionDecision(False, effective, label, lookup, resolution, "suppressed")
        if not self.should_log(requested, effective):
            return AdmissionDecision(False, effective, label, lookup, resolution, "below threshold")
        return AdmissionDecision(True, effective, label, lookup, resolution, "admitted")

    @staticmethod
    def should_log(requested: LogLevel, configured: ConcreteLevel) -> bool:
        """Return ``True`` when ``requested`` meets a non-suppressed ``configured`` level.

        Examples
        --------
        >>> AdmissionEngine.should_log(LogLevel.ERROR, LogLevel.WARNING)
        True
        >>> AdmissionEngine.should_log(LogLevel.EMERGENCY, SUPPRESSED)
        False
        """

        if not isinstance(configured, LogLevel):
            return False
        return meets_threshold(requested, configured)


__all__ = ["AdmissionDecision", "AdmissionEngine", "LevelLookup", "LevelSource", "RuntimeLevels"]
