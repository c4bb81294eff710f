"""
Network Logger - the enable/disable switch that wires everything together.

    registry = TransportRegistry()
    logger = NetworkLogger(registry, store=RedisSettingsStore())
    logger.set_enabled(True)

    async with httpx.AsyncClient(transport=registry) as client:
        await client.get("https://api.example.com/posts/1")   # traced

View the trace while it's written with: tail -f ~/Library/logs/network.log
"""

import threading
from pathlib import Path

import httpx
import redis

from .config import LOG_FILE, Settings, SettingsHolder
from .console import Console
from .errors import SinkError
from .interceptor import Interceptor
from .recorder import Recorder, timestamp
from .registry import TransportRegistry
from .sink import LogSink
from .store import MemorySettingsStore, read_settings


class NetworkLogger:
    def __init__(self, registry: TransportRegistry, store=None, path: str | Path = LOG_FILE,
                 delegate: httpx.AsyncBaseTransport | None = None, console: Console | None = None):
        self.registry = registry
        self.store = store if store is not None else MemorySettingsStore()
        self.console = console or Console()

        # An unreachable store leaves the defaults in place; logging still works
        self.settings = SettingsHolder(read_settings(self.store, self.console, Settings()))
        self.sink = LogSink(path, self.settings, self.console)
        self.recorder = Recorder(self.sink, self.settings, self.console)
        self.interceptor = Interceptor(self.recorder, self.settings, delegate, self.console)

        # Held across register/unregister + flag flip so the two always move together
        self._lock = threading.RLock()
        self._opened = False

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def set_enabled(self, enable: bool = True):
        """The one supported way to start or stop interception. No-op if already in that state."""
        with self._lock:
            if self.settings.enabled == enable:
                return
            if enable:
                self._enable()
            else:
                self._disable()

    def _enable(self):
        if self.settings.get().delete_on_startup and not self._opened:
            self.sink.delete()
        self._register()
        self.settings._set_enabled(True)
        self._write_marker("Network logging enabled")

    def _disable(self):
        # Flag first: in-flight offers from the registry are declined from here on
        self.settings._set_enabled(False)
        self.registry.unregister(self.interceptor)
        self._write_marker("Network logging disabled")

    def _register(self):
        try:
            self.sink.open()
        except SinkError as e:
            self.console.emit(str(e))
        self._opened = True

        self.registry.register(self.interceptor)
        self.console.emit("registered successfully")

        if self.sink.is_open:
            self.console.emit(f"🔍 Network log file path: {self.sink.path}")
            self.console.emit(f"🖥️ View real-time logs with: tail -f \"{self.sink.path}\"")

        endpoints = self.settings.get().allowed_endpoints
        if endpoints:
            self.console.emit(f"Filtering enabled for endpoints: {list(endpoints)}")

    def _write_marker(self, message: str):
        self.sink.append(f"[{timestamp()}] {message}\n")

    def reload(self) -> Settings:
        """Re-read the persisted settings and swap them in. Registration is untouched."""
        settings = read_settings(self.store, self.console, self.settings.get())
        self.settings.swap(settings)
        return settings

    def watch_settings(self):
        """Reload whenever the store signals a change (e.g. the settings page was saved).

        Returns the listener, or None if the store couldn't be subscribed to.
        """
        try:
            return self.store.subscribe(self.reload)
        except redis.RedisError as e:
            self.console.emit(f"Settings watch error: {e}")
            return None

    def shutdown(self):
        self.set_enabled(False)
        self.sink.close()

    async def aclose(self):
        """shutdown(), then release the delegate transport's connections."""
        self.shutdown()
        await self.interceptor.aclose()
