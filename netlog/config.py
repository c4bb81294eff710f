"""
Config - the settings snapshot and the process-wide enable flag.

Settings are immutable; a reload builds a fresh Settings and swaps it in whole,
so readers always see either the old snapshot or the new one.
"""

import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Library directory - the trace file lives at <DATA_DIR>/logs/network.log
DATA_DIR = Path(os.environ.get("NETLOG_DATA_DIR", Path.home() / "Library"))
LOG_DIR = DATA_DIR / "logs"
LOG_FILE = LOG_DIR / "network.log"

# Persisted configuration store
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379")
SETTINGS_KEY = os.environ.get("NETLOG_SETTINGS_KEY", "netlog:settings")
RELOAD_CHANNEL = os.environ.get("NETLOG_RELOAD_CHANNEL", "netlog:reload")

# Persisted keys
LOG_LEVEL_KEY = "network_log_level"
CONSOLE_ONLY_KEY = "network_log_console_only"
DELETE_ON_STARTUP_KEY = "network_log_delete_on_startup"
FILTERED_ENDPOINTS_KEY = "network_log_filtered_endpoints"

TRUE_VALUES = ("1", "true", "yes")


class LogLevel(Enum):
    """How much of each exchange reaches the console."""

    MINIMAL = "minimal"           # one line per request
    VERBOSE = "verbose"           # the full block, same as the file
    FILE_ONLY = "onlyToLogFile"   # nothing on the console


@dataclass(frozen=True)
class Settings:
    log_level: LogLevel = LogLevel.MINIMAL
    console_only: bool = False
    delete_on_startup: bool = False
    allowed_endpoints: tuple[str, ...] = ()


DEFAULTS = {
    LOG_LEVEL_KEY: LogLevel.MINIMAL.value,
    CONSOLE_ONLY_KEY: "false",
    DELETE_ON_STARTUP_KEY: "false",
    FILTERED_ENDPOINTS_KEY: "",
}


class SettingsHolder:
    """Owns the current Settings snapshot and the enabled flag.

    get() is a single attribute read, so it never blocks behind a swap.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()
        self._enabled = False
        self._lock = threading.Lock()

    def get(self) -> Settings:
        return self._settings

    def swap(self, settings: Settings) -> Settings:
        """Install a new snapshot, returning the one it replaced."""
        with self._lock:
            old, self._settings = self._settings, settings
        return old

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _set_enabled(self, enabled: bool):
        # Only NetworkLogger calls this, inside its transition lock
        self._enabled = enabled


def parse_level(value: str | None) -> LogLevel:
    try:
        return LogLevel(value)
    except ValueError:
        return LogLevel.MINIMAL


def parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def parse_endpoints(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated endpoint list, dropping empty segments."""
    if not value:
        return ()
    return tuple(part for part in str(value).split(",") if part)


def load_settings(store) -> Settings:
    """Build a Settings snapshot from the persisted store.

    Malformed or missing values fall back to the defaults.
    """
    return Settings(
        log_level=parse_level(store.get(LOG_LEVEL_KEY)),
        console_only=parse_bool(store.get(CONSOLE_ONLY_KEY)),
        delete_on_startup=parse_bool(store.get(DELETE_ON_STARTUP_KEY)),
        allowed_endpoints=parse_endpoints(store.get(FILTERED_ENDPOINTS_KEY)),
    )


def ensure_defaults(store):
    """Write the documented defaults for any key the store doesn't have yet."""
    for key, value in DEFAULTS.items():
        store.set_default(key, value)


def save_settings(store, settings: Settings):
    store.set(LOG_LEVEL_KEY, settings.log_level.value)
    store.set(CONSOLE_ONLY_KEY, "true" if settings.console_only else "false")
    store.set(DELETE_ON_STARTUP_KEY, "true" if settings.delete_on_startup else "false")
    store.set(FILTERED_ENDPOINTS_KEY, ",".join(settings.allowed_endpoints))


def matches_endpoints(url: str, endpoints) -> bool:
    """True if the allow-list is empty or the URL contains one of its entries."""
    if not endpoints:
        return True
    return any(endpoint in url for endpoint in endpoints)


def build_settings(level: LogLevel, console_only: bool, delete_on_startup: bool, endpoints: str) -> Settings:
    """Turn the settings form's raw values into a Settings snapshot (endpoints are trimmed)."""
    return Settings(
        log_level=level,
        console_only=console_only,
        delete_on_startup=delete_on_startup,
        allowed_endpoints=tuple(part.strip() for part in endpoints.split(",") if part.strip()),
    )
