"""Tests for the trace file sink."""

import pytest

from netlog.config import Settings, SettingsHolder
from netlog.console import Console
from netlog.errors import SinkError
from netlog.sink import LogSink, format_size


class TestOpen:
    def test_creates_intermediate_directories(self, tmp_path, console):
        path = tmp_path / "a" / "b" / "logs" / "network.log"
        sink = LogSink(path, console=console)
        sink.open()
        assert path.is_file()
        sink.close()

    def test_open_is_idempotent(self, sink, log_path):
        sink.append("one\n")
        sink.open()
        sink.append("two\n")
        assert log_path.read_text() == "one\ntwo\n"

    def test_appends_to_existing_file(self, tmp_path, console):
        path = tmp_path / "network.log"
        path.write_text("before\n")
        sink = LogSink(path, console=console)
        sink.open()
        sink.append("after\n")
        sink.close()
        assert path.read_text() == "before\nafter\n"

    def test_directory_failure_raises_and_disables(self, tmp_path, console):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        sink = LogSink(blocker / "logs" / "network.log", console=console)
        with pytest.raises(SinkError):
            sink.open()
        assert sink.disabled
        assert sink.append("lost\n") is False

    def test_no_retry_after_failure(self, tmp_path, console):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        sink = LogSink(blocker / "logs" / "network.log", console=console)
        with pytest.raises(SinkError):
            sink.open()

        blocker.unlink()
        sink.open()
        assert not sink.is_open
        assert sink.append("lost\n") is False
        assert not sink.path.exists()


class TestAppend:
    def test_writes_utf8(self, sink, log_path):
        assert sink.append("🌐 GET https://example.com\n") is True
        assert log_path.read_text(encoding="utf-8") == "🌐 GET https://example.com\n"

    def test_console_only_skips_file(self, sink, settings, log_path):
        settings.swap(Settings(console_only=True))
        assert sink.append("hidden\n") is False
        assert log_path.read_text() == ""

    def test_not_open_is_noop(self, tmp_path, console):
        sink = LogSink(tmp_path / "network.log", console=console)
        assert sink.append("nothing\n") is False
        assert not (tmp_path / "network.log").exists()


class TestSizeCheck:
    def test_warns_once_past_threshold(self, tmp_path, out):
        sink = LogSink(tmp_path / "network.log", SettingsHolder(), Console(stream=out),
                       size_check_delay=0.01, size_threshold=10)
        sink.open()
        sink.append("x" * 20)
        timer = sink._timer
        timer.join(timeout=5)
        sink.append("y" * 20)
        assert sink._timer is timer  # scheduled once per sink
        sink.close()

        warnings = [line for line in out.getvalue().splitlines() if "consider deleting it" in line]
        assert len(warnings) == 1
        assert warnings[0].startswith("[NetworkLogger] Network file size:")

    def test_below_threshold_is_silent(self, sink, out):
        sink.append("small\n")
        assert sink.check_size() is False
        assert out.getvalue() == ""


class TestDelete:
    def test_delete_existing(self, tmp_path, console):
        path = tmp_path / "network.log"
        path.write_text("old")
        assert LogSink(path, console=console).delete() is True
        assert not path.exists()

    def test_delete_missing(self, tmp_path, console):
        assert LogSink(tmp_path / "network.log", console=console).delete() is False


class TestClose:
    def test_close_never_opened(self, tmp_path, console):
        LogSink(tmp_path / "network.log", console=console).close()  # should not raise

    def test_close_twice(self, sink):
        sink.close()
        sink.close()
        assert not sink.is_open


class TestFileSize:
    def test_missing_file(self, tmp_path, console):
        assert LogSink(tmp_path / "none.log", console=console).file_size() == (None, 0)

    def test_existing_file(self, sink):
        sink.append("x" * 2600)
        assert sink.file_size() == ("3 KB", 2600)

    def test_format_size(self):
        assert format_size(0) == "Zero KB"
        assert format_size(1) == "1 KB"
        assert format_size(345_000) == "345 KB"
        assert format_size(1_200_000) == "1.2 MB"
        assert format_size(250 * 1024 * 1024) == "262.1 MB"
