"""
Recorder - turns a TraceRecord into readable trace lines.

The file always gets the full block. The console gets the full block (verbose),
one summary line per request (minimal), or nothing (onlyToLogFile).
"""

import json
from datetime import datetime

from .config import LogLevel, SettingsHolder
from .console import Console
from .models import TraceRecord
from .sink import LogSink

BLOCK_START = "============ NETWORK REQUEST ============"
BLOCK_END = "========================================"

FAILURE_MARKER = "🚫"


def timestamp(now: datetime | None = None) -> str:
    """yyyy-mm-dd HH:MM:SS.mmm"""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


def status_marker(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "✅"
    if 300 <= status_code < 400:
        return "↪️"
    if 400 <= status_code < 500:
        return "⚠️"
    if 500 <= status_code < 600:
        return "❌"
    return "❓"


def format_body(body: bytes) -> tuple[str, str]:
    """Classify and render a body as ("json" | "text" | "binary", rendered).

    JSON is re-indented, UTF-8 text passes through, anything else is reduced
    to its size. Never raises on bad input.
    """
    try:
        value = json.loads(body)
        return "json", json.dumps(value, indent=2, ensure_ascii=False)
    except (ValueError, RecursionError):
        pass  # Not JSON

    try:
        return "text", body.decode("utf-8")
    except UnicodeDecodeError:
        return "binary", f"[Binary data of {len(body)} bytes]"


def _header_lines(title: str, headers) -> list[str]:
    if not headers:
        return []
    return [title] + [f"   {name}: {value}" for name, value in headers]


def _body_lines(prefix: str, label: str, body: bytes) -> list[str]:
    kind, rendered = format_body(body)
    if kind == "json":
        return [f"{prefix} {label} JSON:", rendered]
    if kind == "text":
        return [f"{prefix} {label} DATA:", rendered]
    return [f"{prefix} {label}: {rendered}"]


def render_block(record: TraceRecord, now: datetime | None = None) -> list[str]:
    """The full, fixed-order trace block for one exchange."""
    lines = [
        f"[{timestamp(now)}] {BLOCK_START}",
        f"🌐 {record.method} {record.url}",
    ]
    lines += _header_lines("📤 REQUEST HEADERS:", record.request_headers)
    if record.request_body:
        lines += _body_lines("📤", "REQUEST", record.request_body)

    elapsed = f"⏱️ TIME: {record.elapsed:.2f}s"
    if record.failed:
        lines.append(f"{FAILURE_MARKER} NETWORK ERROR: {record.error}")
        lines.append(elapsed)
    else:
        code = record.status_code if record.status_code is not None else 0
        lines.append(f"{status_marker(code)} STATUS: {code}")
        lines += _header_lines("📥 RESPONSE HEADERS:", record.response_headers)
        lines.append(elapsed)
        if record.response_body:
            lines += _body_lines("📥", "RESPONSE", record.response_body)
        else:
            lines.append("📥 RESPONSE: [No data]")

    lines.append(BLOCK_END)
    return lines


def summary_line(record: TraceRecord) -> str:
    """The single console line used at the minimal level."""
    elapsed = f"⏱️ ({record.elapsed:.2f}s)"
    if record.failed:
        return f"{FAILURE_MARKER} [ERROR] → {record.method} {record.url} - {record.error} - {elapsed}"
    code = record.status_code or 0
    icon = "🔴" if code >= 400 else "🔵"
    return f"{icon} [{code}] → {record.method} {record.url} - {elapsed}"


def parse_blocks(text: str) -> list[list[str]]:
    """Split trace file text back into complete blocks (lines between the delimiters)."""
    blocks = []
    current = None
    for line in text.splitlines():
        if line.endswith(BLOCK_START):
            current = [line]
        elif current is not None:
            current.append(line)
            if line == BLOCK_END:
                blocks.append(current)
                current = None
    return blocks


class Recorder:
    def __init__(self, sink: LogSink, settings: SettingsHolder | None = None,
                 console: Console | None = None):
        self.sink = sink
        self.settings = settings or sink.settings
        self.console = console or sink.console

    def record(self, record: TraceRecord):
        settings = self.settings.get()
        level = settings.log_level

        block = None
        if not settings.console_only or level is LogLevel.VERBOSE:
            block = "\n".join(render_block(record))

        if not settings.console_only:
            # Trailing blank line keeps blocks visually apart in the file
            self.sink.append(block + "\n\n")

        if level is LogLevel.VERBOSE:
            self.console.emit(block)
        elif level is LogLevel.MINIMAL:
            self.console.emit(summary_line(record))
