"""Scope-aware logger façade wrapping a sink.

Purpose
-------
Run every log call through the per-call pipeline: resolve the scope(s),
apply the unknown-scope policy, compute the effective level, gate, decorate,
emit, and always clear the pending explicit scopes.

Contents
--------
* :class:`ScopedLogger` - leveled logging surface with fluent scope
  designation, shared context, runtime overrides, and introspection helpers.

System Role
-----------
The object host applications log through. It owns a
:class:`~lib_log_scoped.application.scope_resolver.ScopeResolver`, an
:class:`~lib_log_scoped.application.admission.AdmissionEngine` built from the
channel's merged scope map, and a
:class:`~lib_log_scoped.application.decorate.ContextDecorator`.

Concurrency
-----------
Pending explicit scopes are held per thread/asyncio task, so a shared logger
never attributes one caller's ``scope()`` to another caller's record. The
runtime-override table and the shared context are plain dictionaries without
locking; hosts mutating them from several threads must fence those calls or
give each unit of work its own logger.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from lib_log_scoped.adapters.frames import StackFrameInspector
from lib_log_scoped.domain.config import Configuration, UnknownScopeHandling
from lib_log_scoped.domain.errors import EmptyScopeIdentifierError, InvalidRuntimeOverrideError, UnknownScopeError
from lib_log_scoped.domain.levels import LogLevel, coerce_level
from lib_log_scoped.domain.patterns import PatternCacheStats
from lib_log_scoped.domain.scope_level import ConcreteLevel, parse_static_level

from .admission import AdmissionEngine
from .decorate import NO_SCOPE_LABEL, ContextDecorator
from .ports.frames import FrameInspectorPort
from .ports.sink import SinkPort
from .scope_resolver import ResolutionMethod, ScopeResolver

logger = logging.getLogger(__name__)

WARNING_KEY = "scoped_logger_warning"
"""Context key tagging the warning emitted under the ``log`` unknown-scope policy."""


class ScopedLogger:
    """Filter records by scope before handing them to ``sink``.

    Parameters
    ----------
    sink:
        Backend implementing :class:`SinkPort`.
    config:
        A :class:`Configuration` snapshot or a plain mapping passed to
        :meth:`Configuration.from_mapping`.
    channel:
        Channel name selecting the scope overlay.
    frame_inspector:
        Caller-frame source; defaults to :class:`StackFrameInspector`.

    Examples
    --------
    >>> class ListSink:
    ...     def __init__(self):
    ...         self.records = []
    ...     def emit(self, level, message, context):
    ...         self.records.append((level.severity, message, dict(context)))
    >>> sink = ListSink()
    >>> log = ScopedLogger(sink, {"scopes": {"auth": "error"}, "auto_detection": {"enabled": False}})
    >>> log.scope("auth").info("hidden")
    >>> log.scope("auth").error("shown")
    >>> sink.records
    [('error', 'shown', {'scope': 'auth'})]
    """

    def __init__(
        self,
        sink: SinkPort,
        config: Configuration | Mapping[str, Any] | None = None,
        channel: str = "default",
        *,
        frame_inspector: FrameInspectorPort | None = None,
    ) -> None:
        self._sink = sink
        self._config = config if isinstance(config, Configuration) else Configuration.from_mapping(config)
        self._channel = channel
        frames = frame_inspector if frame_inspector is not None else StackFrameInspector()
        self._resolver = ScopeResolver(self._config, frames)
        self._engine = AdmissionEngine(self._config, channel)
        self._decorator = ContextDecorator(self._config, frames)
        self._shared_context: dict[str, Any] = {}
        self._runtime_levels: dict[str, ConcreteLevel] = {}

    @property
    def sink(self) -> SinkPort:
        return self._sink

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def shared_context(self) -> dict[str, Any]:
        """Return a copy of the context merged into every record."""

        return dict(self._shared_context)

    # ------------------------------------------------------------------
    # Fluent designation and shared context
    # ------------------------------------------------------------------

    def scope(self, scope: str | Sequence[str]) -> ScopedLogger:
        """Designate the scope(s) of the next log call only.

        An empty sequence clears any pending designation; an empty string
        raises :class:`EmptyScopeIdentifierError`.
        """

        if isinstance(scope, str):
            if not scope:
                raise EmptyScopeIdentifierError()
            self._resolver.set_explicit_scopes((scope,))
            return self
        identifiers = tuple(scope)
        if not identifiers:
            self._resolver.clear_explicit_scopes()
            return self
        self._resolver.set_explicit_scopes(identifiers)
        return self

    @contextmanager
    def bind_scope(self, scope: str) -> Iterator[ScopedLogger]:
        """Attribute calls without an explicit scope to ``scope`` inside the block."""

        with self._resolver.bind_scope(scope):
            yield self

    def with_context(self, context: Mapping[str, Any]) -> ScopedLogger:
        """Merge ``context`` into the shared context (later keys win)."""

        self._shared_context.update(context)
        return self

    def without_context(self) -> ScopedLogger:
        self._shared_context.clear()
        return self

    # ------------------------------------------------------------------
    # Runtime overrides
    # ------------------------------------------------------------------

    def set_runtime_level(self, scope: str, level: Any) -> ScopedLogger:
        """Override the level of ``scope`` (or of a pattern key) until cleared.

        ``level`` may be a :class:`LogLevel`, a level name, ``False`` or
        ``SUPPRESSED``; anything else raises :class:`InvalidRuntimeOverrideError`
        and leaves the table unchanged.
        """

        if not scope:
            raise EmptyScopeIdentifierError()
        parsed = parse_static_level(level)
        if parsed is None:
            raise InvalidRuntimeOverrideError.for_scope(scope, level)
        self._runtime_levels[scope] = parsed
        return self

    def clear_runtime_level(self, scope: str) -> ScopedLogger:
        self._runtime_levels.pop(scope, None)
        return self

    def clear_all_runtime_levels(self) -> ScopedLogger:
        self._runtime_levels.clear()
        return self

    def get_runtime_levels(self) -> dict[str, ConcreteLevel]:
        return dict(self._runtime_levels)

    # ------------------------------------------------------------------
    # Logging surface
    # ------------------------------------------------------------------

    def log(self, level: str | LogLevel, message: object, context: Mapping[str, Any] | None = None) -> None:
        """Run one record through the scope pipeline.

        Raises
        ------
        UnknownScopeError
            When an unconfigured scope is used under the ``exception`` policy.
        InvalidScopeConfigurationError
            When a dynamic rule yields something that is not a level.
        ValueError
            When ``level`` is not one of the eight level names.
        """

        try:
            self._process(coerce_level(level), str(message), dict(context or {}))
        finally:
            self._resolver.clear_explicit_scopes()

    def debug(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, message, context)

    def info(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, message, context)

    def notice(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.NOTICE, message, context)

    def warning(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.WARNING, message, context)

    def error(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, message, context)

    def critical(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.CRITICAL, message, context)

    def alert(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ALERT, message, context)

    def emergency(self, message: object, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.EMERGENCY, message, context)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def level_for(self, scope: str | None) -> ConcreteLevel:
        """Return the level a call attributed to ``scope`` would be gated against."""

        return self._engine.configured_level(scope, self._runtime_levels).level

    def matched_pattern(self, scope: str) -> str | None:
        return self._engine.matcher.find_match(scope)

    def configured_scopes(self) -> dict[str, Any]:
        """Return the merged (global plus channel) scope map."""

        return dict(self._engine.scopes)

    def would_log(self, scope: str | None, level: str | LogLevel) -> bool:
        return self._engine.should_log(coerce_level(level), self.level_for(scope))

    def pattern_cache_stats(self) -> PatternCacheStats:
        return self._engine.matcher.cache_stats()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._sink, name)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _process(self, requested: LogLevel, message: str, context: dict[str, Any]) -> None:
        if not self._config.enabled:
            self._sink.emit(requested, message, self._merge_shared(context))
            return

        explicit = self._resolver.explicit_scopes()
        if explicit:
            scopes: list[str] = list(explicit)
            resolution = ResolutionMethod.EXPLICIT
        else:
            resolved, resolution = self._resolver.resolve_with_method()
            scopes = [resolved] if resolved is not None else []

        if scopes:
            self._handle_unknown_scopes(scopes)

        decision = self._engine.decide(requested, scopes, resolution, self._runtime_levels)
        if not decision.admitted:
            logger.debug(
                "Dropped %s record on channel %s for scope %s (%s)",
                requested.severity,
                self._channel,
                decision.scope_label or NO_SCOPE_LABEL,
                decision.reason,
            )
            return

        enriched = self._decorator.decorate(context, decision, requested)
        self._sink.emit(requested, message, self._merge_shared(enriched))

    def _handle_unknown_scopes(self, scopes: Sequence[str]) -> None:
        unknown = self._engine.unknown_scopes(scopes, self._runtime_levels)
        if not unknown:
            return
        policy = self._config.unknown_scope_policy
        if policy is UnknownScopeHandling.EXCEPTION:
            raise UnknownScopeError(unknown)
        logger.debug("Unknown scopes %s on channel %s handled by policy %s", unknown, self._channel, policy.value)
        if policy is UnknownScopeHandling.LOG:
            plural = "s" if len(unknown) > 1 else ""
            joined = "', '".join(unknown)
            self._sink.emit(
                LogLevel.WARNING,
                f"Unknown scope{plural} '{joined}' used but not configured. Using default log level.",
                {WARNING_KEY: "unknown_scope", "unknown_scopes": list(unknown)},
            )

    def _merge_shared(self, context: Mapping[str, Any]) -> dict[str, Any]:
        return {**self._shared_context, **context}


__all__ = ["ScopedLogger", "WARNING_KEY"]
