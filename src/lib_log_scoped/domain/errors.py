"""Exception hierarchy raised by the scoped logging layer.

Purpose
-------
Give callers precise exception types for the three failure families: bad
configuration (fatal at boot), bad runtime overrides, and scopes that nobody
configured.

Contents
--------
* :class:`ScopedLoggerError` - common root.
* :class:`InvalidScopeConfigurationError` with named constructors.
* :class:`InvalidRuntimeOverrideError`, :class:`EmptyScopeIdentifierError`.
* :class:`UnknownScopeError` carrying the offending identifiers.
"""

from __future__ import annotations

from typing import Iterable, Sequence

_VALID_LEVELS = ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")
_VALID_UNKNOWN_SCOPE_HANDLING = ("exception", "log", "ignore")


class ScopedLoggerError(Exception):
    """Base class for every error raised by :mod:`lib_log_scoped`."""


class InvalidScopeConfigurationError(ScopedLoggerError, ValueError):
    """Configuration value with the wrong type or an unrecognised enum value."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key

    @classmethod
    def invalid_level(cls, level: object, key: str) -> "InvalidScopeConfigurationError":
        return cls(
            f"Invalid log level {level!r} for config key '{key}'. "
            f"Valid levels are: {', '.join(_VALID_LEVELS)}. "
            "You can also use False to suppress a scope completely.",
            key=key,
        )

    @classmethod
    def invalid_unknown_scope_handling(cls, value: object) -> "InvalidScopeConfigurationError":
        return cls(
            f"Invalid unknown_scope_handling value {value!r}. "
            f"Valid values are: {', '.join(_VALID_UNKNOWN_SCOPE_HANDLING)}",
            key="unknown_scope_handling",
        )

    @classmethod
    def invalid_config_type(cls, message: str, *, key: str | None = None) -> "InvalidScopeConfigurationError":
        return cls(
            f"Invalid configuration type: {message}. Check the scoped logger configuration for type mismatches.",
            key=key,
        )


class InvalidRuntimeOverrideError(InvalidScopeConfigurationError):
    """Runtime override set to something that is neither a level nor suppression."""

    @classmethod
    def for_scope(cls, scope: str, level: object) -> "InvalidRuntimeOverrideError":
        return cls(
            f"Invalid runtime level {level!r} for scope '{scope}'. "
            f"Valid levels are: {', '.join(_VALID_LEVELS)}, or False to suppress the scope.",
            key=f"runtime.{scope}",
        )


class EmptyScopeIdentifierError(InvalidScopeConfigurationError):
    """A scope identifier was the empty string."""

    def __init__(self) -> None:
        super().__init__("Scope identifier cannot be empty. Provide a valid scope name or class path.")


class UnknownScopeError(ScopedLoggerError, LookupError):
    """One or more scopes were used without being configured.

    Attributes
    ----------
    scopes:
        Every unknown identifier involved in the rejected call, in call order.
    """

    def __init__(self, scopes: Iterable[str]) -> None:
        self.scopes: tuple[str, ...] = tuple(scopes)
        super().__init__(_unknown_scope_message(self.scopes))


def _unknown_scope_message(scopes: Sequence[str]) -> str:
    """Render the singular/plural explanation for :class:`UnknownScopeError`.

    Examples
    --------
    >>> _unknown_scope_message(["auth"]).startswith("Unknown scope 'auth'")
    True
    >>> _unknown_scope_message(["a", "b"]).startswith("Unknown scopes 'a', 'b'")
    True
    """

    plural = "s" if len(scopes) > 1 else ""
    joined = "', '".join(scopes)
    return (
        f"Unknown scope{plural} '{joined}' used but not configured. "
        f"Add the scope{plural} to the scopes configuration, or set unknown_scope_handling "
        "to 'ignore' or 'log' to allow unconfigured scopes."
    )


__all__ = [
    "EmptyScopeIdentifierError",
    "InvalidRuntimeOverrideError",
    "InvalidScopeConfigurationError",
    "ScopedLoggerError",
    "UnknownScopeError",
]
