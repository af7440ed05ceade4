"""Boot-time validation of a :class:`Configuration` snapshot.

Static values are checked eagerly so operator typos fail application start;
dynamic rules are skipped here and validated each time they are evaluated.
"""

from __future__ import annotations

from typing import Any, Mapping

from .config import Configuration, UnknownScopeHandling
from .errors import InvalidScopeConfigurationError
from .levels import LogLevel
from .scope_level import DynamicLevel, Suppressed


def validate_configuration(config: Configuration) -> Configuration:
    """Raise :class:`InvalidScopeConfigurationError` on the first invalid field.

    Returns ``config`` unchanged so calls can be chained.

    Examples
    --------
    >>> validate_configuration(Configuration.from_mapping({"default_level": "verbose"}))  # doctest: +ELLIPSIS
    Traceback (most recent call last):
    ...
    lib_log_scoped.domain.errors.InvalidScopeConfigurationError: Invalid log level 'verbose' for config key 'default_level'. ...
    """

    _validate_default_level(config)
    _validate_scope_map(config.scopes, "scopes")
    for channel, entries in config.channel_scopes.items():
        _validate_scope_map(entries, f"channel_scopes.{channel}")
    _validate_unknown_scope_handling(config)
    return config


def _validate_default_level(config: Configuration) -> None:
    if not isinstance(config.default_level, LogLevel):
        raise InvalidScopeConfigurationError.invalid_level(config.default_level, "default_level")


def _validate_scope_map(entries: Mapping[str, Any], prefix: str) -> None:
    for scope, level in entries.items():
        if isinstance(level, (LogLevel, Suppressed, DynamicLevel)):
            continue
        raise InvalidScopeConfigurationError.invalid_level(level, f"{prefix}.{scope}")


def _validate_unknown_scope_handling(config: Configuration) -> None:
    if not isinstance(config.unknown_scope_handling, UnknownScopeHandling):
        raise InvalidScopeConfigurationError.invalid_unknown_scope_handling(config.unknown_scope_handling)


__all__ = ["validate_configuration"]
