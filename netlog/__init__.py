"""
netlog - record a readable trace of every HTTP exchange an application makes.
"""

from .config import LogLevel, Settings, SettingsHolder
from .console import Console
from .errors import NoResponseError, SinkError
from .interceptor import HANDLED_EXTENSION, Interceptor
from .lifecycle import NetworkLogger
from .models import TraceRecord
from .recorder import Recorder
from .registry import TransportRegistry
from .sink import LogSink, format_size
from .store import MemorySettingsStore, RedisSettingsStore

__all__ = [
    "Console",
    "HANDLED_EXTENSION",
    "Interceptor",
    "LogLevel",
    "LogSink",
    "MemorySettingsStore",
    "NetworkLogger",
    "NoResponseError",
    "Recorder",
    "RedisSettingsStore",
    "Settings",
    "SettingsHolder",
    "SinkError",
    "TraceRecord",
    "TransportRegistry",
    "format_size",
]
