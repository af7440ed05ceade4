"""Call-stack inspector implementing :class:`FrameInspectorPort`.

Purpose
-------
Walk the interpreter stack with :func:`sys._getframe` and describe each frame
(module, qualified function name, enclosing class, source location) without
touching instance state beyond identifying ``self``/``cls`` when the
qualified name is not resolvable statically.

System Role
-----------
Default collaborator of :class:`~lib_log_scoped.application.scope_resolver.ScopeResolver`
and :class:`~lib_log_scoped.application.decorate.ContextDecorator`. Frames
belonging to this package are dropped before the depth limit is applied so
the limit counts caller frames only.
"""

from __future__ import annotations

import inspect
import sys
from types import FrameType

from lib_log_scoped.application.ports.frames import CallerFrame, FrameInspectorPort, is_package_module


class StackFrameInspector(FrameInspectorPort):
    """Describe the frames above the current log call, nearest first."""

    def frames(self, limit: int) -> list[CallerFrame]:
        collected: list[CallerFrame] = []
        frame: FrameType | None = sys._getframe(1)
        while frame is not None and is_package_module(frame.f_globals.get("__name__", "")):
            frame = frame.f_back
        while frame is not None and len(collected) < limit:
            collected.append(_describe(frame))
            frame = frame.f_back
        return collected


def _describe(frame: FrameType) -> CallerFrame:
    code = frame.f_code
    return CallerFrame(
        module=str(frame.f_globals.get("__name__", "")),
        qualname=getattr(code, "co_qualname", code.co_name),
        owner=_owner_of(frame),
        file=code.co_filename,
        line=frame.f_lineno,
        function=code.co_name,
    )


def _owner_of(frame: FrameType) -> type | None:
    """Return the class whose method ``frame`` executes, if any."""

    code = frame.f_code
    parts = getattr(code, "co_qualname", code.co_name).split(".")
    if len(parts) > 1 and "<locals>" not in parts:
        target: object = frame.f_globals.get(parts[0])
        for part in parts[1:-1]:
            if target is None:
                break
            target = inspect.getattr_static(target, part, None)
        if isinstance(target, type):
            return target
    if code.co_argcount == 0:
        return None
    first = code.co_varnames[0]
    value = frame.f_locals.get(first)
    if first == "cls" and isinstance(value, type):
        return value
    if first == "self" and value is not None:
        return type(value)
    return None


__all__ = ["StackFrameInspector"]
