"""Scope-aware log level filtering in front of any logging backend.

Hosts wrap their sink in a :class:`ScopedLogger` (or obtain one per channel
from a :class:`ScopedLogManager`) and configure verbosity per scope, with
glob patterns, channel overlays, runtime overrides, and dynamic rules.

The package logs its own diagnostics (dropped records, unknown scopes) to the
``lib_log_scoped`` stdlib logger, which carries a :class:`logging.NullHandler`
so nothing is printed unless the host configures it.
"""

from __future__ import annotations

import logging

from .adapters import RichConsoleSink, StackFrameInspector, StdlibLoggingSink
from .application.inspector import ScopeInspector
from .application.manager import ScopedLogManager
from .application.scope_resolver import LogScopeProvider, ResolutionMethod
from .application.scoped_logger import ScopedLogger
from .config import load_configuration
from .domain import (
    SUPPRESSED,
    Configuration,
    DynamicLevel,
    EmptyScopeIdentifierError,
    InvalidRuntimeOverrideError,
    InvalidScopeConfigurationError,
    LogLevel,
    PatternMatcher,
    ScopedLoggerError,
    UnknownScopeError,
    UnknownScopeHandling,
    validate_configuration,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Configuration",
    "DynamicLevel",
    "EmptyScopeIdentifierError",
    "InvalidRuntimeOverrideError",
    "InvalidScopeConfigurationError",
    "LogLevel",
    "LogScopeProvider",
    "PatternMatcher",
    "ResolutionMethod",
    "RichConsoleSink",
    "SUPPRESSED",
    "ScopeInspector",
    "ScopedLogManager",
    "ScopedLogger",
    "ScopedLoggerError",
    "StackFrameInspector",
    "StdlibLoggingSink",
    "UnknownScopeError",
    "UnknownScopeHandling",
    "load_configuration",
    "validate_configuration",
]
