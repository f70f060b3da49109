"""Tests for plugin descriptor loading."""

import json
import logging

import pytest
from pydantic import ValidationError

from launcher.plugins.manifest import PluginDescriptor, read_descriptor


class TestReadDescriptor:
    """Tests for read_descriptor()."""

    def test_valid_descriptor(self, tmp_path):
        path = tmp_path / "calc.json"
        path.write_text(json.dumps({
            "name": "Calculator",
            "description": "Evaluates expressions",
            "pattern": "^calc:",
            "exec": "calc",
            "icon": "accessories-calculator",
        }), encoding="utf-8")

        descriptor = read_descriptor(path)

        assert descriptor == PluginDescriptor(
            name="Calculator",
            description="Evaluates expressions",
            pattern="^calc:",
            exec="calc",
            icon="accessories-calculator",
        )

    def test_invalid_json_is_skipped(self, tmp_path, caplog):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.ERROR):
            assert read_descriptor(path) is None
        assert "Invalid JSON" in caplog.text

    def test_missing_file_is_skipped(self, tmp_path):
        assert read_descriptor(tmp_path / "missing.json") is None

    def test_non_object_is_skipped(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert read_descriptor(path) is None

    def test_missing_pattern_still_loads(self, tmp_path):
        """Pattern problems surface when the pattern is compiled, not here."""
        path = tmp_path / "nopattern.json"
        path.write_text(json.dumps({"name": "x", "exec": "x"}), encoding="utf-8")

        descriptor = read_descriptor(path)

        assert descriptor is not None
        assert descriptor.pattern is None

    def test_descriptor_is_immutable(self):
        descriptor = PluginDescriptor(name="x", pattern="x")

        with pytest.raises(ValidationError):
            descriptor.pattern = "y"

    def test_non_string_display_fields_still_load(self, tmp_path):
        path = tmp_path / "calc.json"
        path.write_text(json.dumps({
            "name": "calc",
            "description": 42,
            "pattern": "^calc:",
            "exec": "c",
            "icon": ["x"],
        }), encoding="utf-8")

        descriptor = read_descriptor(path)

        assert descriptor is not None
        assert descriptor.description == "42"
        assert descriptor.icon == '["x"]'
        assert descriptor.pattern == "^calc:"

    def test_non_string_pattern_loads_as_is(self, tmp_path):
        """A numeric pattern is kept untouched and fails later, at compile time."""
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"name": 7, "pattern": 5, "exec": "x"}), encoding="utf-8")

        descriptor = read_descriptor(path)

        assert descriptor.name == "7"
        assert descriptor.pattern == 5
