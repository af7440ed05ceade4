"""Domain entities and value objects used by the scoped logging layer."""

from __future__ import annotations

from .config import AutoDetectionSettings, Configuration, MetadataSettings, UnknownScopeHandling
from .errors import (
    EmptyScopeIdentifierError,
    InvalidRuntimeOverrideError,
    InvalidScopeConfigurationError,
    ScopedLoggerError,
    UnknownScopeError,
)
from .levels import LogLevel, coerce_level, meets_threshold
from .patterns import PatternCacheStats, PatternMatcher, is_pattern
from .scope_level import SUPPRESSED, DynamicLevel, Suppressed, format_scope_level, resolve_scope_level
from .validation import validate_configuration

__all__ = [
    "AutoDetectionSettings",
    "Configuration",
    "DynamicLevel",
    "EmptyScopeIdentifierError",
    "InvalidRuntimeOverrideError",
    "InvalidScopeConfigurationError",
    "LogLevel",
    "MetadataSettings",
    "PatternCacheStats",
    "PatternMatcher",
    "SUPPRESSED",
    "ScopedLoggerError",
    "Suppressed",
    "UnknownScopeError",
    "UnknownScopeHandling",
    "coerce_level",
    "format_scope_level",
    "is_pattern",
    "meets_threshold",
    "resolve_scope_level",
    "validate_configuration",
]
