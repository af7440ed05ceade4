"""Glob-style scope pattern matching with deterministic specificity ranking.

Purpose
-------
Map a concrete scope identifier (``"payment.stripe"``,
``"app.services.PaymentService"``) onto the most specific configured key,
where keys may contain ``*`` (zero or more characters) and ``?`` (exactly one
character).

Contents
--------
* :class:`PatternMatcher` - compiled-pattern cache plus match-result cache.
* :class:`PatternCacheStats` - cache introspection snapshot.
* :func:`is_pattern`, :func:`wildcard_count`, :func:`compile_pattern`.

System Role
-----------
Owned by each scoped logger (built from its merged channel scope map) and by
the inspection tooling. Keys are frozen at construction; rebuilding the
matcher is the only way to change them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from threading import RLock
from typing import Any, Mapping, Pattern

_WILDCARDS = ("*", "?")


@dataclass(frozen=True, slots=True)
class PatternCacheStats:
    """Snapshot of the matcher caches."""

    compiled_patterns: int
    cached_matches: int


def is_pattern(key: str) -> bool:
    """Return ``True`` when ``key`` contains a wildcard token.

    Examples
    --------
    >>> is_pattern("payment.*"), is_pattern("payment")
    (True, False)
    """

    return any(token in key for token in _WILDCARDS)


def wildcard_count(key: str) -> int:
    """Return the number of ``*`` and ``?`` characters in ``key``."""

    return key.count("*") + key.count("?")


def compile_pattern(key: str) -> Pattern[str]:
    """Translate a scope pattern into an anchored regular expression.

    Every regex metacharacter is escaped except the two wildcard tokens. The
    expression ends in ``\\Z`` so a trailing newline never satisfies it; use
    :meth:`re.Pattern.fullmatch` to anchor the start as well.

    Examples
    --------
    >>> bool(compile_pattern("test?").fullmatch("test1"))
    True
    >>> bool(compile_pattern("test?").fullmatch("test12"))
    False
    >>> bool(compile_pattern("App\\\\Services\\\\*").fullmatch("App\\\\Services\\\\Auth\\\\Login"))
    True
    """

    parts: list[str] = []
    for char in key:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def _specificity(key: str) -> tuple[bool, int, int, str]:
    """Sort key: literal before wildcard, longer first, fewer wildcards, lexical."""

    return (is_pattern(key), -len(key), wildcard_count(key), key)


class PatternMatcher:
    """Find the most specific configured key for a scope identifier.

    Parameters
    ----------
    scope_patterns:
        Mapping whose keys are scope identifiers or patterns. Values are
        ignored; only the keys take part in matching.

    Examples
    --------
    >>> matcher = PatternMatcher({"payment.*": "warning", "payment.stripe": "debug"})
    >>> matcher.find_match("payment.stripe")
    'payment.stripe'
    >>> matcher.find_match("payment.paypal")
    'payment.*'
    >>> matcher.find_match("auth") is None
    True
    """

    def __init__(self, scope_patterns: Mapping[str, Any]) -> None:
        self._keys = tuple(scope_patterns)
        self._literals = frozenset(key for key in self._keys if not is_pattern(key))
        #: filled on first use by :meth:`_regex_for`
        self._compiled: dict[str, Pattern[str]] = {}
        self._cache: dict[str, str | None] = {}
        self._lock = RLock()

    @property
    def patterns(self) -> tuple[str, ...]:
        """Return the keys the matcher was built from."""

        return self._keys

    def find_match(self, scope: str) -> str | None:
        """Return the most specific key matching ``scope`` or ``None``."""

        with self._lock:
            if scope in self._cache:
                return self._cache[scope]
            best = self._search(scope)
            self._cache[scope] = best
            return best

    def clear_cache(self) -> None:
        """Forget cached match results; compiled patterns are kept."""

        with self._lock:
            self._cache.clear()

    def cache_stats(self) -> PatternCacheStats:
        """Return counts of compiled patterns and cached match results."""

        with self._lock:
            return PatternCacheStats(compiled_patterns=len(self._compiled), cached_matches=len(self._cache))

    def _search(self, scope: str) -> str | None:
        if scope in self._literals:
            return scope
        candidates = [key for key in self._keys if self._regex_for(key).fullmatch(scope)]
        if not candidates:
            return None
        return min(candidates, key=_specificity)

    def _regex_for(self, key: str) -> Pattern[str]:
        regex = self._compiled.get(key)
        if regex is None:
            regex = self._compiled[key] = compile_pattern(key)
        return regex


__all__ = ["PatternCacheStats", "PatternMatcher", "compile_pattern", "is_pattern", "wildcard_count"]
