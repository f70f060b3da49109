"""Shared fixtures: stub plugin processes in temporary directories."""

import pytest

from launcher.plugins.channel import ProcessChannel
from launcher.plugins.manager import LauncherService
from stubs import write_stub


@pytest.fixture
def plugin_dirs(tmp_path):
    """(system, local) plugin directories, in precedence order."""
    return tmp_path / "system", tmp_path / "local"


@pytest.fixture
def make_service(plugin_dirs):
    """Build LauncherServices over the temporary directories and shut them down afterwards."""
    services = []

    def factory(**kwargs):
        system, local = plugin_dirs
        kwargs.setdefault("search_paths", [(system, "system"), (local, "local")])
        kwargs.setdefault("response_timeout", 5.0)
        kwargs.setdefault("shutdown_grace", 1.0)
        service = LauncherService(**kwargs)
        services.append(service)
        return service

    yield factory

    for service in services:
        service.shutdown()


@pytest.fixture
def make_channel(tmp_path):
    """Spawn stub channels directly and kill any left running."""
    channels = []

    def factory(replies=None, honor_quit=True, name="stub", delays=None):
        script = write_stub(tmp_path / f"{name}.py", replies, honor_quit, delays)
        channel = ProcessChannel.spawn(script)
        assert channel is not None
        channels.append(channel)
        return channel

    yield factory

    for channel in channels:
        channel.kill()
        channel.wait(5)
