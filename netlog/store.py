"""
Settings stores - where the logger's configuration is persisted.

RedisSettingsStore keeps the values in a Redis hash and signals reloads over
pub/sub, so a settings page in another process can reconfigure a running logger.
MemorySettingsStore is the in-process equivalent.
"""

import redis

from .config import REDIS_URL, RELOAD_CHANNEL, SETTINGS_KEY, Settings, ensure_defaults, load_settings


class MemorySettingsStore:
    def __init__(self, values: dict | None = None):
        self.values = dict(values or {})
        self._subscribers = []

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str):
        self.values[key] = value

    def set_default(self, key: str, value: str):
        self.values.setdefault(key, value)

    def subscribe(self, callback):
        self._subscribers.append(callback)

    def publish_reload(self):
        for callback in list(self._subscribers):
            callback()


class RedisSettingsStore:
    """Settings in a Redis hash, reload signals on a Redis channel."""

    def __init__(self, client: redis.Redis | None = None, key: str = SETTINGS_KEY,
                 channel: str = RELOAD_CHANNEL):
        self.r = client if client is not None else redis.from_url(REDIS_URL, decode_responses=True)
        self.key = key
        self.channel = channel

    def get(self, key: str) -> str | None:
        return self.r.hget(self.key, key)

    def set(self, key: str, value: str):
        self.r.hset(self.key, key, value)

    def set_default(self, key: str, value: str):
        self.r.hsetnx(self.key, key, value)

    def subscribe(self, callback):
        """Call `callback` on every reload signal. Returns the listener thread (stop() it to unsubscribe)."""
        pubsub = self.r.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(**{self.channel: lambda message: callback()})
        return pubsub.run_in_thread(sleep_time=1.0, daemon=True)

    def publish_reload(self):
        self.r.publish(self.channel, "reload")


def read_settings(store, console, fallback: Settings) -> Settings:
    """ensure_defaults() + load_settings(), or `fallback` if the store can't be reached."""
    try:
        ensure_defaults(store)
        return load_settings(store)
    except redis.RedisError as e:
        console.emit(f"Settings store error: {e} - keeping current settings")
        return fallback
