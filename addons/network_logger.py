"""
Network Logger - mitmproxy addon that writes the netlog trace for proxied traffic.

Same trace file, same block format and console rules as the in-process
interceptor, for apps you can't hand an httpx transport to.

Usage:
    mitmdump -s addons/network_logger.py

Settings come from Redis when REDIS_URL is set (and follow the settings page's
reload signal); otherwise the defaults apply.
"""

import os
import time

import redis
from mitmproxy import http

from netlog.config import LOG_FILE, SettingsHolder, matches_endpoints
from netlog.console import Console
from netlog.errors import SinkError
from netlog.models import TraceRecord
from netlog.recorder import Recorder
from netlog.sink import LogSink
from netlog.store import MemorySettingsStore, RedisSettingsStore, read_settings


def flow_record(flow: http.HTTPFlow) -> TraceRecord:
    """Build a TraceRecord from a finished (or failed) flow."""
    req = flow.request

    end = time.time()
    if flow.response is not None and flow.response.timestamp_end:
        end = flow.response.timestamp_end

    record = TraceRecord(
        method=req.method,
        url=req.pretty_url,
        request_headers=list(req.headers.items(multi=True)),
        request_body=req.get_content(strict=False) or None,
        elapsed=max(0.0, end - req.timestamp_start),
    )

    if flow.error is not None:
        record.error = flow.error.msg
    elif flow.response is not None:
        record.status_code = flow.response.status_code
        record.response_headers = list(flow.response.headers.items(multi=True))
        record.response_body = flow.response.get_content(strict=False)
    return record


class NetworkLoggerAddon:
    def __init__(self, store=None, path=LOG_FILE, console: Console | None = None):
        self.store = store
        self.path = path
        self.console = console or Console()
        self.settings = SettingsHolder()
        self.sink = None
        self.recorder = None
        self._watcher = None

    def running(self):
        """Load settings and open the trace file once the proxy is up."""
        if self.store is None:
            self.store = RedisSettingsStore() if os.environ.get("REDIS_URL") else MemorySettingsStore()
            if isinstance(self.store, RedisSettingsStore):
                try:
                    self._watcher = self.store.subscribe(self.reload)
                except redis.RedisError as e:
                    self.console.emit(f"Settings watch error: {e}")

        self.reload()

        self.sink = LogSink(self.path, self.settings, self.console)
        self.recorder = Recorder(self.sink, self.settings, self.console)
        try:
            self.sink.open()
            self.console.emit(f"🔍 Network log file path: {self.sink.path}")
        except SinkError as e:
            self.console.emit(str(e))

    def reload(self):
        self.settings.swap(read_settings(self.store, self.console, self.settings.get()))

    def _wants(self, flow: http.HTTPFlow) -> bool:
        if self.recorder is None or flow.metadata.get("netlog_recorded"):
            return False
        return matches_endpoints(flow.request.pretty_url, self.settings.get().allowed_endpoints)

    def _record(self, flow: http.HTTPFlow):
        flow.metadata["netlog_recorded"] = True
        self.recorder.record(flow_record(flow))

    def response(self, flow: http.HTTPFlow):
        """Record a completed exchange."""
        if not self._wants(flow):
            return
        try:
            self._record(flow)
        except Exception as e:
            self.console.emit(f"Response error: {e}")

    def error(self, flow: http.HTTPFlow):
        """Record an exchange that failed before a response arrived."""
        if not self._wants(flow):
            return
        try:
            self._record(flow)
        except Exception as e:
            self.console.emit(f"Error hook error: {e}")

    def done(self):
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        if self.sink is not None:
            self.sink.close()


addons = [NetworkLoggerAddon()]
