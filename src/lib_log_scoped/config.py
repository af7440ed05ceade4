"""Configuration sources: files, environment overrides, and ``.env`` loading.

Purpose
-------
Turn operator-facing inputs into the plain mapping consumed by
:meth:`lib_log_scoped.domain.config.Configuration.from_mapping`.

Contents
--------
* :func:`load_config_source` - read a ``.toml`` or ``.json`` file.
* :func:`apply_env_overrides` - layer ``SCOPED_LOG_*`` variables on top.
* :func:`load_configuration` - file + environment into a snapshot.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - opt-in ``.env`` support.

System Role
-----------
Outer layer used by the CLI and by hosts that prefer file-based settings.
Values already present in the process environment always win over ``.env``
entries.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv

from .domain.config import Configuration
from .domain.errors import InvalidScopeConfigurationError

DOTENV_ENV_VAR = "SCOPED_LOG_USE_DOTENV"
"""Environment toggle enabling ``.env`` loading when no CLI flag decides."""

CONFIG_ENV_VAR = "SCOPED_LOG_CONFIG"
"""Environment variable naming the configuration file used by the CLI."""

TOML_TABLE = "scoped_logger"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})

_BOOLEAN_ENV_KEYS: Mapping[str, str] = {
    "SCOPED_LOG_ENABLED": "enabled",
    "SCOPED_LOG_DEBUG_MODE": "debug_mode",
    "SCOPED_LOG_INCLUDE_METADATA": "include_metadata",
}
_STRING_ENV_KEYS: Mapping[str, str] = {
    "SCOPED_LOG_DEFAULT_LEVEL": "default_level",
    "SCOPED_LOG_UNKNOWN_SCOPE_HANDLING": "unknown_scope_handling",
}

_dotenv_loaded: Path | None = None


def load_config_source(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a configuration file into a plain mapping.

    TOML files may hold the settings at top level or inside a
    ``[scoped_logger]`` table (useful inside ``pyproject.toml``-style files).

    Raises
    ------
    FileNotFoundError
        When ``path`` does not exist.
    InvalidScopeConfigurationError
        For unsupported extensions or a non-mapping document.
    """

    source = Path(path)
    suffix = source.suffix.lower()
    if suffix == ".toml":
        with source.open("rb") as handle:
            data: Any = tomllib.load(handle)
        if isinstance(data.get(TOML_TABLE), dict):
            data = data[TOML_TABLE]
    elif suffix == ".json":
        data = json.loads(source.read_text(encoding="utf-8"))
    else:
        raise InvalidScopeConfigurationError.invalid_config_type(
            f"unsupported configuration file {source.name!r} (expected .toml or .json)", key="config"
        )
    if not isinstance(data, dict):
        raise InvalidScopeConfigurationError.invalid_config_type(f"{source.name} must contain a mapping", key="config")
    return data


def apply_env_overrides(source: Mapping[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of ``source`` with ``SCOPED_LOG_*`` variables applied.

    Examples
    --------
    >>> apply_env_overrides({"default_level": "info"}, {"SCOPED_LOG_DEFAULT_LEVEL": "debug", "SCOPED_LOG_ENABLED": "no"})
    {'default_level': 'debug', 'enabled': False}
    """

    env = os.environ if environ is None else environ
    merged = dict(source)
    for variable, key in _STRING_ENV_KEYS.items():
        value = env.get(variable)
        if value is not None and value.strip():
            merged[key] = value.strip()
    for variable, key in _BOOLEAN_ENV_KEYS.items():
        value = env.get(variable)
        if value is not None and value.strip():
            merged[key] = _parse_bool(variable, value)
    return merged


def load_configuration(path: str | os.PathLike[str] | None = None, environ: Mapping[str, str] | None = None) -> Configuration:
    """Build a :class:`Configuration` from an optional file plus the environment."""

    source = load_config_source(path) if path is not None else {}
    return Configuration.from_mapping(apply_env_overrides(source, environ))


def enable_dotenv(search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` (searching upwards) without overriding the environment.

    Returns the loaded file, or ``None`` when none was found. Subsequent calls
    reuse the first result.
    """

    global _dotenv_loaded
    if _dotenv_loaded is not None:
        return _dotenv_loaded
    if search_from is not None:
        candidate = _find_upwards(search_from)
    else:
        found = find_dotenv(usecwd=True)
        candidate = Path(found).resolve() if found else None
    if candidate is None:
        return None
    load_dotenv(candidate, override=False)
    _dotenv_loaded = candidate
    return candidate


def should_use_dotenv(*, explicit: bool | None, env_value: str | None) -> bool:
    """Decide whether to load ``.env``: an explicit flag beats the environment toggle.

    Examples
    --------
    >>> should_use_dotenv(explicit=None, env_value="yes")
    True
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(explicit=None, env_value=None)
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def _find_upwards(start: Path) -> Path | None:
    for directory in (start.resolve(), *start.resolve().parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _parse_bool(variable: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise InvalidScopeConfigurationError.invalid_config_type(f"{variable} must be a boolean flag, got {value!r}", key=variable)


def _reset_dotenv_state_for_testing() -> None:
    global _dotenv_loaded
    _dotenv_loaded = None


__all__ = [
    "CONFIG_ENV_VAR",
    "DOTENV_ENV_VAR",
    "apply_env_overrides",
    "enable_dotenv",
    "load_config_source",
    "load_configuration",
    "should_use_dotenv",
]
