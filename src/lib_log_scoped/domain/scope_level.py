"""Scope-level values: concrete levels, suppression, and dynamic rules.

Purpose
-------
Model the treatment configured for a scope as a small tagged union so the
admission engine never has to guess what ``False`` or a callable means.

Contents
--------
* :data:`SUPPRESSED` - sentinel meaning "never emit".
* :class:`DynamicLevel` - wrapper around a nullary rule evaluated per call.
* :func:`parse_static_level` / :func:`coerce_scope_value` - normalisation of
  configuration values.
* :func:`resolve_scope_level` - evaluation into a concrete level or suppression.
* :func:`format_scope_level` - display helper for inspection tooling.

System Role
-----------
Domain value objects shared by configuration, validation, the runtime
override table, and the admission engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

from .errors import InvalidScopeConfigurationError
from .levels import LogLevel


class Suppressed(Enum):
    """Single-member enum used as the suppression sentinel."""

    SUPPRESSED = "suppressed"

    def __repr__(self) -> str:
        return "SUPPRESSED"


SUPPRESSED = Suppressed.SUPPRESSED

_SUPPRESSION_WORDS = frozenset({"false", "suppressed", "off"})


@dataclass(frozen=True, slots=True)
class DynamicLevel:
    """Scope level computed at log time by calling ``rule``.

    The rule must return a :class:`LogLevel`, a level name, ``False`` or
    :data:`SUPPRESSED`. Results are never cached so a rule may vary its answer
    between calls (for example based on environment variables).

    Examples
    --------
    >>> rule = DynamicLevel(lambda: "debug")
    >>> resolve_scope_level(rule) is LogLevel.DEBUG
    True
    """

    rule: Callable[[], Any]

    def evaluate(self) -> "ConcreteLevel":
        """Invoke the rule and validate its result."""

        result = self.rule()
        parsed = parse_static_level(result)
        if parsed is None:
            raise InvalidScopeConfigurationError.invalid_level(_describe(result), "closure")
        return parsed


ConcreteLevel = Union[LogLevel, Suppressed]
ScopeLevel = Union[LogLevel, Suppressed, DynamicLevel]


def parse_static_level(value: Any) -> ConcreteLevel | None:
    """Return the concrete level encoded by ``value`` or ``None`` when unrecognised.

    Examples
    --------
    >>> parse_static_level("WARNING") is LogLevel.WARNING
    True
    >>> parse_static_level(False) is SUPPRESSED
    True
    >>> parse_static_level("verbose") is None
    True
    """

    if isinstance(value, (LogLevel, Suppressed)):
        return value
    if value is False:
        return SUPPRESSED
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _SUPPRESSION_WORDS:
            return SUPPRESSED
        try:
            return LogLevel.from_name(normalized)
        except ValueError:
            return None
    return None


def coerce_scope_value(value: Any) -> Any:
    """Normalise a configuration value while keeping unrecognised input intact.

    Callables become :class:`DynamicLevel`; parsable values become concrete
    levels; anything else is returned unchanged so validation can report it
    under its configuration key.
    """

    if isinstance(value, DynamicLevel):
        return value
    if callable(value) and not isinstance(value, (LogLevel, Suppressed)):
        return DynamicLevel(value)
    parsed = parse_static_level(value)
    return value if parsed is None else parsed


def resolve_scope_level(value: Any, key: str = "closure") -> ConcreteLevel:
    """Evaluate ``value`` into a :class:`LogLevel` or :data:`SUPPRESSED`.

    Raises
    ------
    InvalidScopeConfigurationError
        When a static value is not a level, or a dynamic rule yields a
        non-level result.
    """

    if isinstance(value, DynamicLevel):
        return value.evaluate()
    parsed = parse_static_level(value)
    if parsed is None:
        raise InvalidScopeConfigurationError.invalid_level(_describe(value), key)
    return parsed


def format_scope_level(value: Any) -> str:
    """Return a human-readable label for ``value``.

    Examples
    --------
    >>> format_scope_level(SUPPRESSED)
    'SUPPRESSED'
    >>> format_scope_level(LogLevel.NOTICE)
    'notice'
    """

    if value is SUPPRESSED:
        return "SUPPRESSED"
    if isinstance(value, LogLevel):
        return value.severity
    if isinstance(value, DynamicLevel):
        return "dynamic"
    return str(value)


def _describe(value: Any) -> str:
    return value if isinstance(value, str) else type(value).__name__


__all__ = [
    "ConcreteLevel",
    "DynamicLevel",
    "SUPPRESSED",
    "ScopeLevel",
    "Suppressed",
    "coerce_scope_value",
    "format_scope_level",
    "parse_static_level",
    "resolve_scope_level",
]
