"""Tests for the plugin management tool."""

import argparse
import json
import os
import sys

import pytest

import manage_plugins
from stubs import FILES_PLUGIN


class TestInstall:
    """Tests for `manage_plugins.py install`."""

    def test_bundled_plugin_runs_with_this_interpreter(self, tmp_path, monkeypatch):
        monkeypatch.setattr(manage_plugins, "LOCAL_PLUGINS_DIR", tmp_path)

        manage_plugins.cmd_install(argparse.Namespace(path="files"))

        installed = tmp_path / "files.py"
        first_line, _, rest = installed.read_text(encoding="utf-8").partition("\n")
        assert first_line == f"#!{sys.executable}"
        assert rest == FILES_PLUGIN.read_text(encoding="utf-8").partition("\n")[2]
        assert os.access(installed, os.X_OK)
        assert json.loads((tmp_path / "files.json").read_text(encoding="utf-8"))["exec"] == "files.py"

    def test_non_python_executable_is_copied_verbatim(self, tmp_path):
        source = tmp_path / "tool.sh"
        source.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
        dest = tmp_path / "installed.sh"

        manage_plugins.copy_executable(source, dest)

        assert dest.read_text(encoding="utf-8") == "#!/bin/sh\necho hi\n"
        assert os.access(dest, os.X_OK)

    def test_refuses_to_overwrite(self, tmp_path, monkeypatch):
        monkeypatch.setattr(manage_plugins, "LOCAL_PLUGINS_DIR", tmp_path)
        (tmp_path / "files.json").write_text("{}", encoding="utf-8")

        with pytest.raises(SystemExit):
            manage_plugins.cmd_install(argparse.Namespace(path="files"))
