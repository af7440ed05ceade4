"""Adapters implementing the application ports: frame inspection and sinks."""

from __future__ import annotations

from .console import RichConsoleSink
from .frames import StackFrameInspector
from .stdlib_sink import StdlibLoggingSink, register_level_names

__all__ = ["RichConsoleSink", "StackFrameInspector", "StdlibLoggingSink", "register_level_names"]
