"""Channel registry handing out scoped loggers.

Purpose
-------
Give host applications one injectable object that maps channel names to
loggers: each channel's sink comes from a factory and is wrapped in a
:class:`~lib_log_scoped.application.scoped_logger.ScopedLogger` unless scoped
filtering is disabled globally or for that channel.

Contents
--------
* :class:`ScopedLogManager` - validated configuration, per-channel cache,
  default-channel forwarding, and :meth:`ScopedLogManager.reload`.

System Role
-----------
Composition point for hosts. There is no process-wide instance: create one at
boot and pass it to the code that needs loggers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from threading import RLock
from typing import Any

from lib_log_scoped.domain.config import Configuration
from lib_log_scoped.domain.validation import validate_configuration

from .ports.frames import FrameInspectorPort
from .ports.sink import SinkPort
from .scoped_logger import ScopedLogger

SinkFactory = Callable[[str], SinkPort]


class ScopedLogManager:
    """Build and cache one logger per channel.

    Parameters
    ----------
    config:
        Snapshot or plain mapping; validated at construction when ``validate``
        is true so configuration mistakes fail application start.
    sink_factory:
        Callable returning the underlying sink for a channel name. Called at
        most once per channel until :meth:`reload`.
    default_channel:
        Channel used by :meth:`default`, ``channel(None)``, and attribute
        forwarding.
    frame_inspector:
        Optional caller-frame source shared by every logger.

    Examples
    --------
    >>> class NullSink:
    ...     def emit(self, level, message, context):
    ...         pass
    >>> manager = ScopedLogManager({"disabled_channels": ["audit"]}, lambda name: NullSink())
    >>> type(manager.channel("app")).__name__, type(manager.channel("audit")).__name__
    ('ScopedLogger', 'NullSink')
    >>> manager.channel("app") is manager.channel("app")
    True
    """

    def __init__(
        self,
        config: Configuration | Mapping[str, Any] | None,
        sink_factory: SinkFactory,
        *,
        default_channel: str = "default",
        validate: bool = True,
        frame_inspector: FrameInspectorPort | None = None,
    ) -> None:
        self._sink_factory = sink_factory
        self._default_channel = default_channel
        self._validate = validate
        self._frame_inspector = frame_inspector
        self._lock = RLock()
        self._sinks: dict[str, SinkPort] = {}
        self._channels: dict[str, ScopedLogger | SinkPort] = {}
        self._config = self._prepare(config)

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def default_channel(self) -> str:
        return self._default_channel

    def channel(self, name: str | None = None) -> ScopedLogger | SinkPort:
        """Return the logger for ``name`` (the default channel when ``None``).

        The raw sink is returned when the configuration is disabled or the
        channel is listed in ``disabled_channels``.
        """

        channel_name = name if name is not None else self._default_channel
        with self._lock:
            cached = self._channels.get(channel_name)
            if cached is not None:
                return cached
            sink = self._sink_for(channel_name)
            built: ScopedLogger | SinkPort = sink
            if self._should_wrap(channel_name):
                built = ScopedLogger(sink, self._config, channel_name, frame_inspector=self._frame_inspector)
            self._channels[channel_name] = built
            return built

    def default(self) -> ScopedLogger | SinkPort:
        return self.channel(None)

    def reload(self, config: Configuration | Mapping[str, Any] | None) -> Configuration:
        """Swap in a new configuration snapshot and drop cached loggers.

        Sinks are kept; loggers handed out earlier keep their old snapshot.
        """

        prepared = self._prepare(config)
        with self._lock:
            self._config = prepared
            self._channels.clear()
        return prepared

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.default(), name)

    def _prepare(self, config: Configuration | Mapping[str, Any] | None) -> Configuration:
        snapshot = config if isinstance(config, Configuration) else Configuration.from_mapping(config)
        if self._validate:
            validate_configuration(snapshot)
        return snapshot

    def _sink_for(self, channel_name: str) -> SinkPort:
        sink = self._sinks.get(channel_name)
        if sink is None:
            sink = self._sink_factory(channel_name)
            self._sinks[channel_name] = sink
        return sink

    def _should_wrap(self, channel_name: str) -> bool:
        if not self._config.enabled:
            return False
        return not self._config.is_channel_disabled(channel_name)


__all__ = ["ScopedLogManager", "SinkFactory"]
