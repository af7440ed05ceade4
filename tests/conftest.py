from __future__ import annotations

from dataclasses import dataclass, field
from io import StringIO
from typing import Any, Callable, Mapping, Sequence

import pytest
from rich.console import Console

from lib_log_scoped.application.ports.frames import CallerFrame
from lib_log_scoped.domain.levels import LogLevel


@dataclass
class RecordedRecord:
    level: LogLevel
    message: str
    context: dict[str, Any]


@dataclass
class RecordingSink:
    """Sink fake collecting every emitted record."""

    records: list[RecordedRecord] = field(default_factory=list)
    flushes: int = 0

    def emit(self, level: LogLevel, message: str, context: Mapping[str, Any]) -> None:
        self.records.append(RecordedRecord(level, message, dict(context)))

    def flush(self) -> str:
        self.flushes += 1
        return "flushed"

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.records]


class StaticFrames:
    """Frame inspector fake returning a fixed stack."""

    def __init__(self, frames: Sequence[CallerFrame] = ()) -> None:
        self._frames = list(frames)
        self.limits: list[int] = []

    def frames(self, limit: int) -> list[CallerFrame]:
        self.limits.append(limit)
        return self._frames[:limit]


def make_frame(
    module: str = "app.services",
    *,
    owner: type | None = None,
    qualname: str = "handle",
    file: str = "/srv/app/app/services.py",
    line: int = 10,
    function: str | None = None,
) -> CallerFrame:
    return CallerFrame(
        module=module,
        qualname=qualname,
        owner=owner,
        file=file,
        line=line,
        function=function or qualname.rsplit(".", 1)[-1],
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def static_frames() -> Callable[..., StaticFrames]:
    def factory(*frames: CallerFrame) -> StaticFrames:
        return StaticFrames(frames)

    return factory


@pytest.fixture
def frame_factory() -> Callable[..., CallerFrame]:
    return make_frame


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=160, color_system=None)
