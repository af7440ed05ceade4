"""Port for enumerating the frames that led to a log call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable


@dataclass(frozen=True, slots=True)
class CallerFrame:
    """One calling frame, nearest to the log call first.

    Attributes
    ----------
    module:
        ``__name__`` of the module executing the frame.
    qualname:
        Qualified name of the executing function (``Class.method``).
    owner:
        Class object enclosing the function, or ``None`` for module-level code.
    file, line, function:
        Source location of the frame.
    """

    module: str
    qualname: str
    owner: type | None
    file: str
    line: int
    function: str

    @property
    def unit_name(self) -> str:
        """Return ``module.ClassQualname`` for methods, else the module name."""

        if self.owner is not None:
            return f"{self.owner.__module__}.{self.owner.__qualname__}"
        return self.module


_PACKAGE = "lib_log_scoped"
_PACKAGE_TESTS = "lib_log_scoped.tests"


def is_package_module(module: str) -> bool:
    """Return ``True`` for this package's own (non-test) modules.

    Examples
    --------
    >>> is_package_module("lib_log_scoped.application.scoped_logger")
    True
    >>> is_package_module("lib_log_scoped.tests.fixtures"), is_package_module("app.services")
    (False, False)
    """

    if module == _PACKAGE:
        return True
    return module.startswith(_PACKAGE + ".") and not module.startswith(_PACKAGE_TESTS)


@runtime_checkable
class FrameInspectorPort(Protocol):
    """Enumerate calling frames outside this package, nearest first."""

    def frames(self, limit: int) -> Sequence[CallerFrame]:
        """Return up to ``limit`` frames, nearest first."""


__all__ = ["CallerFrame", "FrameInspectorPort", "is_package_module"]
