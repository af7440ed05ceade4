"""Ports (protocols) the application layer depends on."""

from __future__ import annotations

from .frames import CallerFrame, FrameInspectorPort, is_package_module
from .sink import SinkPort

__all__ = ["CallerFrame", "FrameInspectorPort", "SinkPort", "is_package_module"]
