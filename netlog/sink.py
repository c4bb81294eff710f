"""
Log Sink - owns the trace file.

The file is opened once in append mode and only ever written at its end, so
`tail -f` (or network_tail.py) can follow it while requests are in flight.
One lock guards the physical write: each call to append() lands as a single
contiguous chunk.
"""

import threading
from pathlib import Path

from .config import LOG_FILE, SettingsHolder
from .console import Console
from .errors import SinkError

SIZE_WARNING_BYTES = 200 * 1024 * 1024
SIZE_CHECK_DELAY = 10.0


def format_size(size: int) -> str:
    """Human-readable file size, KB below a megabyte and MB above (decimal units)."""
    if size <= 0:
        return "Zero KB"
    if size < 1_000_000:
        return f"{max(1, round(size / 1000))} KB"
    return f"{size / 1_000_000:.1f} MB"


class LogSink:
    def __init__(self, path: str | Path = LOG_FILE, settings: SettingsHolder | None = None,
                 console: Console | None = None, size_check_delay: float = SIZE_CHECK_DELAY,
                 size_threshold: int = SIZE_WARNING_BYTES):
        self.path = Path(path)
        self.settings = settings or SettingsHolder()
        self.console = console or Console()
        self.size_check_delay = size_check_delay
        self.size_threshold = size_threshold
        self.disabled = False
        self._file = None
        self._lock = threading.Lock()
        self._size_checked = False
        self._timer: threading.Timer | None = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self, path: str | Path | None = None):
        """Create the log directory and file if needed and open it for append.

        Raises SinkError on failure; file writing stays off for the rest of the session.
        """
        if path is not None:
            self.path = Path(path)
        if self._file is not None or self.disabled:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.disabled = True
            raise SinkError(f"Error creating log directory: {e}") from e

        try:
            # "ab" creates the file if missing and pins every write to end-of-file
            self._file = open(self.path, "ab")
        except OSError as e:
            self.disabled = True
            raise SinkError(f"Error opening log file: {e}") from e

    def append(self, text: str) -> bool:
        """Append text to the trace file. Returns False if nothing was written."""
        if self.settings.get().console_only:
            return False

        data = text.encode("utf-8")
        with self._lock:
            if self._file is None or self.disabled:
                return False
            try:
                self._file.write(data)
                self._file.flush()
            except OSError as e:
                self.console.emit(f"Error writing log file: {e}")
                return False
            first_write = not self._size_checked
            self._size_checked = True

        if first_write:
            self._schedule_size_check()
        return True

    def _schedule_size_check(self):
        self._timer = threading.Timer(self.size_check_delay, self.check_size)
        self._timer.daemon = True
        self._timer.start()

    def check_size(self) -> bool:
        """Print a one-time advisory if the file has grown past the threshold."""
        formatted, size = self.file_size()
        if formatted is not None and size >= self.size_threshold:
            self.console.emit(f"Network file size: {formatted} - consider deleting it")
            return True
        return False

    def file_size(self) -> tuple[str | None, int]:
        try:
            size = self.path.stat().st_size
        except OSError:
            return None, 0
        return format_size(size), size

    def delete(self) -> bool:
        """Remove the trace file. Returns whether there was a file to delete."""
        if not self.path.exists():
            self.console.emit("Network log file does not exist.")
            return False
        try:
            self.path.unlink()
        except OSError as e:
            self.console.emit(f"Error deleting network log file: {e}")
            return False
        self.console.emit("Network log file deleted successfully.")
        return True

    def close(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        with self._lock:
            if self._file is None:
                return
            self._file.flush()
            self._file.close()
            self._file = None
