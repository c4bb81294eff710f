"""
Network Logger Settings - Streamlit page for configuring a running network logger.

Reads the persisted settings from Redis, lets you edit them, writes them back
and publishes a reload signal. Loggers started with watch_settings() (and the
mitmproxy addon) pick the change up without a restart.

    streamlit run dashboard/app.py
"""

import redis
import streamlit as st

from netlog.config import (
    LOG_FILE,
    REDIS_URL,
    LogLevel,
    build_settings,
    ensure_defaults,
    load_settings,
    save_settings,
)
from netlog.sink import LogSink
from netlog.store import RedisSettingsStore

LEVEL_LABELS = {
    LogLevel.MINIMAL: "Minimal",
    LogLevel.VERBOSE: "Verbose",
    LogLevel.FILE_ONLY: "Only to Log File",
}


# === Streamlit App ===

st.set_page_config(
    page_title="Network Logger",
    page_icon="🌐",
    layout="centered",
)

st.title("🌐 Network Logger")

store = RedisSettingsStore()
try:
    store.r.ping()
except redis.ConnectionError:
    st.error(f"Cannot connect to Redis at {REDIS_URL}")
    st.stop()

ensure_defaults(store)
current = load_settings(store)

# Log file
st.subheader("📄 Log File")
formatted, size = LogSink(LOG_FILE).file_size()
col1, col2 = st.columns(2)
with col1:
    st.metric(label="Size", value=formatted or "No file")
with col2:
    st.caption(f"`{LOG_FILE}`")
st.code(f'tail -f "{LOG_FILE}"', language="bash")

st.divider()

levels = list(LEVEL_LABELS)
with st.form("settings"):
    st.subheader("Console Logging Level")
    level = st.selectbox(
        "Log Level",
        levels,
        index=levels.index(current.log_level),
        format_func=LEVEL_LABELS.get,
    )

    st.subheader("Logging Options")
    console_only = st.toggle("Log Only to Console", value=current.console_only)
    delete_on_startup = st.toggle("Delete Log File on Startup", value=current.delete_on_startup)

    st.subheader("Endpoint Filtering")
    endpoints = st.text_input(
        "Comma-separated Endpoints",
        value=",".join(current.allowed_endpoints),
        help="Only URLs containing one of these are logged. Empty logs everything.",
    )

    if st.form_submit_button("Apply Settings"):
        save_settings(store, build_settings(level, console_only, delete_on_startup, endpoints))
        store.publish_reload()
        st.success("Settings applied")
