"""Tests for ProcessChannel."""

import logging
import time

from launcher.plugins.channel import ProcessChannel
from launcher.plugins.lifecycle import PluginLifecycle
from stubs import queried, started_source, wait_for


class TestSpawn:
    """Tests for ProcessChannel.spawn()."""

    def test_missing_executable(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR):
            assert ProcessChannel.spawn(tmp_path / "does-not-exist") is None
        assert "Failed to spawn" in caplog.text

    def test_non_executable_file(self, tmp_path):
        script = tmp_path / "plain.py"
        script.write_text("print('hi')\n", encoding="utf-8")
        script.chmod(0o644)

        assert ProcessChannel.spawn(script) is None


class TestExchange:
    """Tests for writing events and reading replies."""

    def test_write_then_read(self, make_channel):
        channel = make_channel({"query": queried("2")})

        assert channel.write_line('{"event": "query", "value": "calc:1+1"}')
        assert channel.read_line(timeout=5) == queried("2")

    def test_read_times_out(self, make_channel):
        channel = make_channel({})
        channel.write_line('{"event": "query", "value": "x"}')

        started = time.monotonic()
        assert channel.read_line(timeout=0.3) is None
        assert time.monotonic() - started < 3
        assert not channel.closed

    def test_discard_pending_drops_late_replies(self, make_channel):
        channel = make_channel({"query": queried("late")})
        channel.write_line('{"event": "query", "value": "a"}')
        channel.write_line('{"event": "query", "value": "b"}')

        assert wait_for(lambda: channel._lines.qsize() == 2)
        assert channel.discard_pending() == 2
        assert channel.read_line(timeout=0.2) is None

    def test_stderr_is_logged_not_returned(self, make_channel, caplog):
        channel = make_channel({"query": queried("x")})

        with caplog.at_level(logging.WARNING, logger="launcher.plugins.channel"):
            channel.write_line('{"event": "submit", "id": 3}')
            assert wait_for(lambda: "submitted 3" in caplog.text)

        channel.write_line('{"event": "query", "value": "x"}')
        assert channel.read_line(timeout=5) == queried("x")


class TestTermination:
    """Tests for the exit watch."""

    def test_exit_closes_channel(self, make_channel):
        channel = make_channel({"query": "EXIT"})
        channel.write_line('{"event": "query", "value": "x"}')

        assert channel.wait(5)
        assert channel.closed
        assert channel.returncode == 3

        started = time.monotonic()
        assert channel.read_line() is None
        assert channel.read_line() is None
        assert time.monotonic() - started < 1
        assert channel.write_line('{"event": "query", "value": "x"}') is False

    def test_quit_twice_does_not_raise(self, make_channel):
        channel = make_channel({})
        plugin = started_source(channel)
        lifecycle = PluginLifecycle()

        assert lifecycle.quit(plugin) is True
        assert channel.wait(5)
        assert lifecycle.quit(plugin) is False

    def test_terminate_unresponsive_process(self, make_channel):
        channel = make_channel({}, honor_quit=False)
        channel.write_line('{"event": "quit"}')

        assert not channel.wait(0.3)
        channel.terminate()
        assert channel.wait(5)
