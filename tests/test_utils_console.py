"""
Tests for utils.console module - dual-mode CLI output utilities.

Covers:
- OutputMode format validation and JSON buffering
- Output functions in human and agent modes
- print_versions_table in both modes
"""

import json

import pytest

from version_ledger.storage.version_table import Feature, VersionRecord
from version_ledger.utils.console import (
    OutputMode,
    error,
    feature_label,
    info,
    output_mode,
    print_versions_table,
    success,
)


@pytest.fixture
def reset_output_mode():
    """Reset global output_mode to default state after each test."""
    original_format = output_mode.format
    output_mode._json_buffer.clear()

    yield output_mode

    output_mode.format = original_format
    output_mode._json_buffer.clear()


@pytest.fixture
def sample_records():
    return [
        VersionRecord(Feature.OFFLINE, "downloads", 1),
        VersionRecord(Feature.CACHE_CONTENT_METADATA, "cache1", 3),
        VersionRecord(1042, "plugin", 7),
    ]


class TestOutputMode:
    def test_defaults_to_text(self):
        mode = OutputMode()
        assert mode.is_human()
        assert not mode.is_agent()

    def test_json_mode(self):
        mode = OutputMode("json")
        assert mode.is_agent()

    def test_invalid_format_rejected(self):
        with pytest.raises(ValueError, match="Invalid format"):
            OutputMode("xml")

    def test_invalid_format_assignment_rejected(self):
        mode = OutputMode()
        with pytest.raises(ValueError, match="Invalid format"):
            mode.format = "yaml"
        assert mode.format == "text"

    def test_flush_json_writes_and_clears(self, capsys):
        mode = OutputMode("json")
        mode.add_json("version", 2)

        mode.flush_json()

        assert json.loads(capsys.readouterr().out) == {"version": 2}
        mode.flush_json()
        assert capsys.readouterr().out == ""

    def test_flush_json_noop_in_human_mode(self, capsys):
        mode = OutputMode()
        mode.add_json("version", 2)

        mode.flush_json()

        assert capsys.readouterr().out == ""


def test_feature_label():
    assert feature_label(1) == "CACHE_CONTENT_METADATA"
    assert feature_label(Feature.EXTERNAL) == "EXTERNAL"
    assert feature_label(1042) == "1042"


class TestHumanMode:
    def test_success(self, reset_output_mode, capsys):
        success("Version set")
        assert "Version set" in capsys.readouterr().out

    def test_error_goes_to_stderr(self, reset_output_mode, capsys):
        error("Database locked")
        captured = capsys.readouterr()
        assert "Database locked" in captured.err
        assert "Database locked" not in captured.out

    def test_info(self, reset_output_mode, capsys):
        info("Database: ./versions.db")
        assert "./versions.db" in capsys.readouterr().out

    def test_versions_table(self, reset_output_mode, capsys, sample_records):
        print_versions_table(sample_records)

        out = capsys.readouterr().out
        assert "Recorded Versions" in out
        assert "CACHE_CONTENT_METADATA" in out
        assert "cache1" in out
        assert "1042" in out

    def test_empty_versions_table(self, reset_output_mode, capsys):
        print_versions_table([])
        assert "No versions recorded" in capsys.readouterr().out


class TestAgentMode:
    def test_success_and_error_buffer(self, reset_output_mode, capsys):
        output_mode.format = "json"

        success("ok")
        assert output_mode._json_buffer == {"status": "success", "message": "ok"}

        error("bad")
        assert output_mode._json_buffer["status"] == "error"
        assert output_mode._json_buffer["error"] == "bad"
        assert capsys.readouterr().out == ""

    def test_info_is_silent(self, reset_output_mode, capsys):
        output_mode.format = "json"

        info("hidden")

        assert output_mode._json_buffer == {}
        assert capsys.readouterr().out == ""

    def test_versions_table_buffers_records(self, reset_output_mode, sample_records):
        output_mode.format = "json"

        print_versions_table(sample_records)

        assert output_mode._json_buffer["versions"] == [
            {
                "feature": 0,
                "feature_name": "OFFLINE",
                "instance_uid": "downloads",
                "version": 1,
            },
            {
                "feature": 1,
                "feature_name": "CACHE_CONTENT_METADATA",
                "instance_uid": "cache1",
                "version": 3,
            },
            {
                "feature": 1042,
                "feature_name": "1042",
                "instance_uid": "plugin",
                "version": 7,
            },
        ]
