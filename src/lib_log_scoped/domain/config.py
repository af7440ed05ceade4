"""Immutable configuration snapshot for the scoped logging layer.

Purpose
-------
Capture every policy knob (default level, scope map, per-channel overlays,
auto-detection, unknown-scope policy, context/metadata/debug toggles) in one
read-only value object built once from a plain mapping.

Contents
--------
* :class:`UnknownScopeHandling` - policy for unconfigured scopes.
* :class:`AutoDetectionSettings` / :class:`MetadataSettings` - nested groups.
* :class:`Configuration` - the snapshot plus :meth:`Configuration.from_mapping`.
* ``DEFAULT_FRAMEWORK_NAMESPACES`` / ``DEFAULT_SKIP_PATHS`` constants.

System Role
-----------
Sits in the domain layer. Construction only checks shapes; semantic checks
(valid level names, valid policy names) live in
:mod:`lib_log_scoped.domain.validation` so hosts can fail fast at boot.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import InvalidScopeConfigurationError
from .levels import LogLevel
from .scope_level import coerce_scope_value, parse_static_level

DEFAULT_FRAMEWORK_NAMESPACES: tuple[str, ...] = (
    "logging",
    "click",
    "rich",
    "pytest",
    "_pytest",
    "pluggy",
    "unittest",
    "importlib",
    "runpy",
    "asyncio",
    "concurrent",
    "threading",
    "contextlib",
    "functools",
    "django",
    "flask",
    "werkzeug",
    "starlette",
    "fastapi",
    "uvicorn",
)
"""Module prefixes treated as framework code during caller auto-detection."""

DEFAULT_SKIP_PATHS: tuple[str, ...] = ("/site-packages/", "/dist-packages/")

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class UnknownScopeHandling(Enum):
    """What to do when a call names a scope nobody configured."""

    EXCEPTION = "exception"
    LOG = "log"
    IGNORE = "ignore"

    @classmethod
    def from_value(cls, value: "str | UnknownScopeHandling") -> "UnknownScopeHandling":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidScopeConfigurationError.invalid_unknown_scope_handling(value) from exc


_POLICY_VALUES = frozenset(member.value for member in UnknownScopeHandling)


@dataclass(frozen=True, slots=True)
class AutoDetectionSettings:
    """Caller-identity detection knobs.

    Attributes
    ----------
    enabled:
        Walk the call stack to attribute records to the calling class/module.
    identifier_name:
        Name of the class-level (or module-level) attribute declaring a scope.
    stack_depth:
        Maximum number of frames inspected.
    skip_framework:
        Ignore frames whose module belongs to ``framework_namespaces``.
    skip_paths:
        Ignore frames whose source path contains any of these substrings.
    """

    enabled: bool = True
    identifier_name: str = "log_scope"
    stack_depth: int = 10
    skip_framework: bool = True
    skip_paths: tuple[str, ...] = DEFAULT_SKIP_PATHS
    framework_namespaces: tuple[str, ...] = DEFAULT_FRAMEWORK_NAMESPACES


@dataclass(frozen=True, slots=True)
class MetadataSettings:
    """Caller-location metadata knobs."""

    enabled: bool = False
    skip_vendor: bool = True
    relative_paths: bool = True
    base_path: str | None = None


@dataclass(frozen=True, slots=True)
class Configuration:
    """Read-only policy snapshot consumed by loggers and inspection tooling.

    Level-like fields keep recognised values normalised (``LogLevel``,
    ``SUPPRESSED``, ``DynamicLevel``) and unrecognised values verbatim, so
    :func:`~lib_log_scoped.domain.validation.validate_configuration` can name
    the offending key.
    """

    enabled: bool = True
    default_level: Any = LogLevel.INFO
    scopes: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    unknown_scope_handling: Any = UnknownScopeHandling.EXCEPTION
    channel_scopes: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)
    auto_detection: AutoDetectionSettings = field(default_factory=AutoDetectionSettings)
    disabled_channels: frozenset[str] = frozenset()
    include_scope_in_context: bool = True
    scope_context_key: str = "scope"
    metadata: MetadataSettings = field(default_factory=MetadataSettings)
    debug_mode: bool = False

    def __post_init__(self) -> None:
        default = parse_static_level(self.default_level)
        if isinstance(default, LogLevel):
            object.__setattr__(self, "default_level", default)
        if isinstance(self.unknown_scope_handling, str):
            normalized = self.unknown_scope_handling.strip().lower()
            if normalized in _POLICY_VALUES:
                object.__setattr__(self, "unknown_scope_handling", UnknownScopeHandling(normalized))
        object.__setattr__(self, "scopes", _freeze_scope_map(self.scopes))
        channels = {str(name): _freeze_scope_map(entries) for name, entries in self.channel_scopes.items()}
        object.__setattr__(self, "channel_scopes", MappingProxyType(channels))
        object.__setattr__(self, "disabled_channels", frozenset(self.disabled_channels))

    @classmethod
    def from_mapping(cls, source: Mapping[str, Any] | None = None) -> "Configuration":
        """Build a snapshot from a nested mapping using documented defaults.

        Raises
        ------
        InvalidScopeConfigurationError
            When a field has the wrong shape (e.g. ``scopes`` is not a mapping).

        Examples
        --------
        >>> config = Configuration.from_mapping({"scopes": {"auth": "error"}})
        >>> config.default_level is LogLevel.INFO, config.scopes["auth"] is LogLevel.ERROR
        (True, True)
        """

        data = _require_mapping(source or {}, "config")
        detection = _require_mapping(data.get("auto_detection", {}), "auto_detection")
        scopes = _require_mapping(data.get("scopes", {}), "scopes")
        channel_source = _require_mapping(data.get("channel_scopes", {}), "channel_scopes")
        channel_scopes = {name: _require_mapping(entries, f"channel_scopes.{name}") for name, entries in channel_source.items()}
        base_path = data.get("metadata_base_path")
        if base_path is not None and not isinstance(base_path, str):
            raise InvalidScopeConfigurationError.invalid_config_type("metadata_base_path must be a string or None", key="metadata_base_path")

        auto_detection = AutoDetectionSettings(
            enabled=_boolean(detection, "enabled", True, prefix="auto_detection."),
            identifier_name=_string(detection, "property", "log_scope", prefix="auto_detection."),
            stack_depth=_integer(detection, "stack_depth", 10, prefix="auto_detection."),
            skip_framework=_boolean(detection, "skip_vendor", True, prefix="auto_detection."),
            skip_paths=_strings(detection, "skip_paths", DEFAULT_SKIP_PATHS, prefix="auto_detection."),
            framework_namespaces=_strings(detection, "framework_namespaces", DEFAULT_FRAMEWORK_NAMESPACES, prefix="auto_detection."),
        )
        metadata = MetadataSettings(
            enabled=_boolean(data, "include_metadata", False),
            skip_vendor=_boolean(data, "metadata_skip_vendor", True),
            relative_paths=_boolean(data, "metadata_relative_paths", True),
            base_path=base_path,
        )
        return cls(
            enabled=_boolean(data, "enabled", True),
            default_level=_string(data, "default_level", "info"),
            scopes=scopes,
            unknown_scope_handling=_string(data, "unknown_scope_handling", "exception"),
            channel_scopes=channel_scopes,
            auto_detection=auto_detection,
            disabled_channels=frozenset(_strings(data, "disabled_channels", ())),
            include_scope_in_context=_boolean(data, "include_scope_in_context", True),
            scope_context_key=_string(data, "scope_context_key", "scope"),
            metadata=metadata,
            debug_mode=_boolean(data, "debug_mode", False),
        )

    @property
    def default_log_level(self) -> LogLevel:
        """Return :attr:`default_level` as a :class:`LogLevel` (raises when invalid)."""

        if isinstance(self.default_level, LogLevel):
            return self.default_level
        raise InvalidScopeConfigurationError.invalid_level(self.default_level, "default_level")

    @property
    def unknown_scope_policy(self) -> UnknownScopeHandling:
        """Return :attr:`unknown_scope_handling` as an enum member (raises when invalid)."""

        return UnknownScopeHandling.from_value(self.unknown_scope_handling)

    def scopes_for_channel(self, channel: str) -> Mapping[str, Any]:
        """Return the overlay configured for ``channel`` (empty when none)."""

        return self.channel_scopes.get(channel, _EMPTY)

    def merged_scopes(self, channel: str | None = None) -> Mapping[str, Any]:
        """Return global scopes overlaid with ``channel``'s entries (channel wins)."""

        if channel is None:
            return self.scopes
        overlay = self.scopes_for_channel(channel)
        if not overlay:
            return self.scopes
        return MappingProxyType({**self.scopes, **overlay})

    def is_channel_disabled(self, channel: str) -> bool:
        return channel in self.disabled_channels


def _freeze_scope_map(entries: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({str(key): coerce_scope_value(value) for key, value in entries.items()})


def _require_mapping(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{key} must be a mapping, got {type(value).__name__}", key=key)
    return value


def _boolean(data: Mapping[str, Any], key: str, default: bool, *, prefix: str = "") -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{prefix}{key} must be a boolean", key=prefix + key)
    return value


def _string(data: Mapping[str, Any], key: str, default: str, *, prefix: str = "") -> Any:
    value = data.get(key, default)
    if isinstance(value, (str, LogLevel, UnknownScopeHandling)):
        return value
    raise InvalidScopeConfigurationError.invalid_config_type(f"{prefix}{key} must be a string", key=prefix + key)


def _integer(data: Mapping[str, Any], key: str, default: int, *, prefix: str = "") -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{prefix}{key} must be an integer", key=prefix + key)
    return value


def _strings(data: Mapping[str, Any], key: str, default: Sequence[str], *, prefix: str = "") -> tuple[str, ...]:
    value = data.get(key, default)
    if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, set, frozenset)):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{prefix}{key} must be a list of strings", key=prefix + key)
    items = tuple(value)
    if not all(isinstance(item, str) for item in items):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{prefix}{key} must be a list of strings", key=prefix + key)
    return items


__all__ = [
    "AutoDetectionSettings",
    "Configuration",
    "DEFAULT_FRAMEWORK_NAMESPACES",
    "DEFAULT_SKIP_PATHS",
    "MetadataSettings",
    "UnknownScopeHandling",
]
