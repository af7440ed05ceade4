"""Context enrichment applied to admitted records.

Purpose
-------
Build the context forwarded to the sink: the scope field, optional caller
location metadata, and the optional debug-resolution bundle.

Contents
--------
* :class:`ContextDecorator` with :meth:`scope_field`, :meth:`metadata_fields`,
  :meth:`debug_bundle` and the combined :meth:`decorate`.
* ``DEBUG_KEY`` / ``NO_SCOPE_LABEL`` constants.

System Role
-----------
Runs after the admission gate passed; it never drops records and never
raises for missing metadata (absent fields are simply left out).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from lib_log_scoped.domain.config import Configuration
from lib_log_scoped.domain.levels import LogLevel
from lib_log_scoped.domain.scope_level import format_scope_level

from .admission import AdmissionDecision
from .ports.frames import CallerFrame, FrameInspectorPort, is_package_module

DEBUG_KEY = "scoped_logger_debug"
NO_SCOPE_LABEL = "(no scope)"

_METADATA_FRAME_LIMIT = 15
_VENDOR_FRAGMENTS = ("/site-packages/", "/dist-packages/")


class ContextDecorator:
    """Merge scope, metadata, and debug fields into a record's context."""

    def __init__(self, config: Configuration, frames: FrameInspectorPort) -> None:
        self._config = config
        self._frames = frames

    def decorate(self, context: Mapping[str, Any], decision: AdmissionDecision, requested: LogLevel) -> dict[str, Any]:
        """Apply every enabled enrichment in order: scope, metadata, debug."""

        enriched = self.scope_field(context, decision.scope_label)
        enriched = self.metadata_fields(enriched)
        return self.debug_bundle(enriched, decision, requested)

    def scope_field(self, context: Mapping[str, Any], scope_label: str | None) -> dict[str, Any]:
        """Add ``scope_context_key`` when a scope resolved and the field is enabled.

        Examples
        --------
        >>> from lib_log_scoped.domain.config import Configuration
        >>> decorator = ContextDecorator(Configuration(), frames=None)
        >>> decorator.scope_field({"user": 1}, "auth")
        {'user': 1, 'scope': 'auth'}
        >>> decorator.scope_field({}, None)
        {}
        """

        enriched = dict(context)
        if scope_label is None or not self._config.include_scope_in_context:
            return enriched
        enriched[self._config.scope_context_key] = scope_label
        return enriched

    def metadata_fields(self, context: Mapping[str, Any]) -> dict[str, Any]:
        """Add ``file``, ``line``, ``class``, and ``function`` of the caller when enabled."""

        enriched = dict(context)
        if not self._config.metadata.enabled:
            return enriched
        frame = self._metadata_frame()
        if frame is None:
            return enriched
        owner = frame.owner
        fields = {
            "file": self._format_path(frame.file) if frame.file else None,
            "line": frame.line,
            "class": f"{owner.__module__}.{owner.__qualname__}" if owner is not None else None,
            "function": frame.function,
        }
        enriched.update({key: value for key, value in fields.items() if value is not None})
        return enriched

    def debug_bundle(self, context: Mapping[str, Any], decision: AdmissionDecision, requested: LogLevel) -> dict[str, Any]:
        """Attach the resolution explanation under ``scoped_logger_debug`` in debug mode."""

        enriched = dict(context)
        if not self._config.debug_mode:
            return enriched
        lookup = decision.lookup
        bundle: dict[str, Any] = {
            "resolved_scope": decision.scope_label if decision.scope_label is not None else NO_SCOPE_LABEL,
            "log_level": requested.severity,
            "configured_level": format_scope_level(decision.effective_level),
            "resolution_method": decision.resolution.value,
            "runtime_override": "yes" if lookup is not None and lookup.runtime_override else "no",
        }
        if lookup is not None and lookup.matched_pattern is not None and lookup.matched_pattern != decision.scope_label:
            bundle["matched_pattern"] = lookup.matched_pattern
        enriched[DEBUG_KEY] = bundle
        return enriched

    def _metadata_frame(self) -> CallerFrame | None:
        for frame in self._frames.frames(_METADATA_FRAME_LIMIT):
            if is_package_module(frame.module) or _is_logging_module(frame.module):
                continue
            if self._config.metadata.skip_vendor and _is_vendor_path(frame.file):
                continue
            return frame
        return None

    def _format_path(self, file: str) -> str:
        if not self._config.metadata.relative_paths:
            return file
        base = Path(self._config.metadata.base_path) if self._config.metadata.base_path else Path.cwd()
        path = Path(file)
        if path.is_relative_to(base):
            return path.relative_to(base).as_posix()
        return file


def _is_logging_module(module: str) -> bool:
    return module == "logging" or module.startswith("logging.")


def _is_vendor_path(file: str) -> bool:
    normalized = file.replace("\\", "/")
    return any(fragment in normalized for fragment in _VENDOR_FRAGMENTS)


__all__ = ["ContextDecorator", "DEBUG_KEY", "NO_SCOPE_LABEL"]
