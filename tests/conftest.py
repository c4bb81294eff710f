import io

import pytest
import redis

from netlog.config import SettingsHolder
from netlog.console import Console
from netlog.recorder import Recorder
from netlog.sink import LogSink
from netlog.store import MemorySettingsStore


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def console(out):
    return Console(stream=out)


@pytest.fixture
def settings():
    holder = SettingsHolder()
    holder._set_enabled(True)
    return holder


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "logs" / "network.log"


@pytest.fixture
def sink(log_path, settings, console):
    sink = LogSink(log_path, settings, console, size_check_delay=3600)
    sink.open()
    yield sink
    sink.close()


@pytest.fixture
def recorder(sink, settings, console):
    return Recorder(sink, settings, console)


class DownStore(MemorySettingsStore):
    """A settings store whose Redis server stops answering while `down` is set."""

    def __init__(self, values=None, down=True):
        super().__init__(values)
        self.down = down

    def _check(self):
        if self.down:
            raise redis.ConnectionError("Error 111 connecting to 127.0.0.1:1. Connection refused.")

    def get(self, key):
        self._check()
        return super().get(key)

    def set_default(self, key, value):
        self._check()
        super().set_default(key, value)

    def subscribe(self, callback):
        self._check()
        super().subscribe(callback)


@pytest.fixture
def down_store():
    return DownStore()
