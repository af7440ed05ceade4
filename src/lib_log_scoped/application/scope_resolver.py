"""Per-call scope identification with a fixed priority order.

Purpose
-------
Decide which scope identifier a pending log call belongs to:

1. explicit scopes set through the fluent ``scope()`` designator,
2. a scope bound to the current execution context via :meth:`ScopeResolver.bind_scope`,
3. the calling class (or module) path when it is a configured scope key,
4. a scope declared by the calling class/module through a static accessor,
5. otherwise no scope (the default level applies).

Contents
--------
* :class:`ResolutionMethod` - which rule produced the scope.
* :class:`LogScopeProvider` - optional protocol for classes declaring a scope.
* :class:`ScopeResolver` - the resolver itself.

System Role
-----------
Owned by a :class:`~lib_log_scoped.application.scoped_logger.ScopedLogger`.
Pending explicit scopes live in a :class:`contextvars.ContextVar`, so each
thread and asyncio task sees its own pending designation and a shared logger
never attributes one caller's scope to another caller's record.
"""

from __future__ import annotations

import inspect
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any, ClassVar, Protocol, runtime_checkable

from lib_log_scoped.domain.config import Configuration
from lib_log_scoped.domain.errors import EmptyScopeIdentifierError

from .ports.frames import CallerFrame, FrameInspectorPort, is_package_module

_MISSING = object()


class ResolutionMethod(Enum):
    """Which priority rule resolved the scope of a call."""

    EXPLICIT = "explicit (scope() method)"
    BOUND = "bound (scope context)"
    AUTO_CLASS = "auto-detected (class path)"
    AUTO_DECLARED = "auto-detected (declared log scope)"
    DEFAULT = "default (no scope detected)"


@runtime_checkable
class LogScopeProvider(Protocol):
    """Classes may declare the scope their records belong to.

    Examples
    --------
    >>> class PaymentService:
    ...     log_scope = "payment"
    >>> isinstance(PaymentService, LogScopeProvider)
    True
    """

    log_scope: ClassVar[str]


class ScopeResolver:
    """Resolve the scope of the pending log call.

    Parameters
    ----------
    config:
        Configuration snapshot providing the scope map and auto-detection knobs.
    frames:
        Frame inspector used for caller auto-detection.
    """

    def __init__(
        self,
        config: Configuration,
        frames: FrameInspectorPort,
    ) -> None:
        self._config = config
        self._frames = frames
        self._explicit: ContextVar[tuple[str, ...]] = ContextVar(f"lib_log_scoped_explicit_{id(self):x}", default=())
        self._bound: ContextVar[tuple[str, ...]] = ContextVar(f"lib_log_scoped_bound_{id(self):x}", default=())

    def set_explicit_scopes(self, scopes: Sequence[str]) -> None:
        """Designate ``scopes`` for the next log call in this context."""

        normalized = tuple(scopes)
        if any(not scope for scope in normalized):
            raise EmptyScopeIdentifierError()
        self._explicit.set(normalized)

    def clear_explicit_scopes(self) -> None:
        self._explicit.set(())

    def explicit_scopes(self) -> tuple[str, ...]:
        return self._explicit.get()

    def has_explicit_scope(self) -> bool:
        return bool(self._explicit.get())

    @contextmanager
    def bind_scope(self, scope: str) -> Iterator[str]:
        """Attribute every call inside the ``with`` block to ``scope``.

        Explicit ``scope()`` designations still win; nested bindings shadow
        outer ones until the inner block exits.
        """

        if not scope:
            raise EmptyScopeIdentifierError()
        token = self._bound.set(self._bound.get() + (scope,))
        try:
            yield scope
        finally:
            self._bound.reset(token)

    def bound_scope(self) -> str | None:
        stack = self._bound.get()
        return stack[-1] if stack else None

    def resolve(self) -> str | None:
        """Return the first explicit scope or the detected scope, else ``None``."""

        scope, _method = self.resolve_with_method()
        return scope

    def resolve_with_method(self) -> tuple[str | None, ResolutionMethod]:
        """Return the resolved scope together with the rule that produced it."""

        explicit = self._explicit.get()
        if explicit:
            return explicit[0], ResolutionMethod.EXPLICIT
        bound = self.bound_scope()
        if bound is not None:
            return bound, ResolutionMethod.BOUND
        if self._config.auto_detection.enabled:
            frame = self.calling_frame()
            if frame is not None:
                unit = frame.unit_name
                if unit in self._config.scopes:
                    return unit, ResolutionMethod.AUTO_CLASS
                declared = self._declared_scope(frame)
                if declared is not None:
                    return declared, ResolutionMethod.AUTO_DECLARED
        return None, ResolutionMethod.DEFAULT

    def calling_frame(self) -> CallerFrame | None:
        """Return the nearest frame outside this package, frameworks, and skip paths."""

        settings = self._config.auto_detection
        for frame in self._frames.frames(settings.stack_depth):
            if is_package_module(frame.module):
                continue
            if settings.skip_framework and _in_namespaces(frame.module, settings.framework_namespaces):
                continue
            normalized_path = frame.file.replace("\\", "/")
            if any(fragment in normalized_path for fragment in settings.skip_paths):
                continue
            return frame
        return None

    def _declared_scope(self, frame: CallerFrame) -> str | None:
        holder: Any = frame.owner if frame.owner is not None else sys.modules.get(frame.module)
        if holder is None:
            return None
        for name in _accessor_names(self._config.auto_detection.identifier_name):
            raw = inspect.getattr_static(holder, name, _MISSING)
            if raw is _MISSING:
                continue
            value = _read_static(holder, raw)
            if isinstance(value, str) and value:
                return value
        return None


def _accessor_names(identifier: str) -> tuple[str, ...]:
    """Return the attribute names checked for a declared scope.

    Examples
    --------
    >>> _accessor_names("log_scope")
    ('log_scope', 'get_log_scope', 'getLogScope')
    """

    camel = "get" + "".join(part[:1].upper() + part[1:] for part in identifier.split("_") if part)
    names = [identifier, f"get_{identifier}", camel]
    return tuple(dict.fromkeys(names))


def _read_static(holder: Any, raw: Any) -> Any:
    """Read a class- or module-level accessor without touching instance state."""

    if isinstance(raw, str):
        return raw
    if isinstance(raw, staticmethod):
        return raw.__func__()
    if isinstance(raw, classmethod):
        return raw.__func__(holder)
    if inspect.ismodule(holder) and inspect.isfunction(raw):
        return raw()
    return None


def _in_namespaces(module: str, namespaces: Sequence[str]) -> bool:
    return any(module == namespace or module.startswith(namespace + ".") for namespace in namespaces)


__all__ = ["LogScopeProvider", "ResolutionMethod", "ScopeResolver"]
