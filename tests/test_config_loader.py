"""
Tests for config.loader and config.schema modules.

This module tests configuration loading and validation:
- YAML loading and parsing
- Pydantic schema validation (defaults and validators)
- Error handling for missing files, invalid YAML and empty files
- Building the configured database
"""

import pytest
import yaml
from pydantic import ValidationError

from version_ledger.config.loader import build_database, load_config
from version_ledger.config.schema import (
    DEFAULT_DB_PATH,
    DatabaseSettings,
    LedgerConfig,
)
from version_ledger.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
)
from version_ledger.storage.database import SQLiteDatabase

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def valid_config_dict(tmp_path):
    return {
        "database": {
            "path": str(tmp_path / "ledger" / "versions.db"),
            "timeout_seconds": 2.5,
        },
        "logging": {"verbose": True},
    }


@pytest.fixture
def write_config(tmp_path):
    """Write a dict (or raw text) to a config file and return its path."""

    def _write(content, name="version_ledger.config.yaml"):
        config_file = tmp_path / name
        if isinstance(content, str):
            config_file.write_text(content, encoding="utf-8")
        else:
            with config_file.open("w", encoding="utf-8") as f:
                yaml.dump(content, f)
        return config_file

    return _write


# ============================================================================
# Schema
# ============================================================================


def test_defaults():
    config = LedgerConfig()

    assert config.database.path == DEFAULT_DB_PATH
    assert config.database.timeout_seconds == 5.0
    assert config.logging.verbose is False


def test_default_sections_are_not_shared():
    first = LedgerConfig()
    first.database.path = "/tmp/other.db"

    assert LedgerConfig().database.path == DEFAULT_DB_PATH


@pytest.mark.parametrize("path", ["", "   "])
def test_empty_path_rejected(path):
    with pytest.raises(ValidationError, match="path cannot be empty"):
        DatabaseSettings(path=path)


@pytest.mark.parametrize("timeout", [0, -1.0])
def test_non_positive_timeout_rejected(timeout):
    with pytest.raises(ValidationError, match="timeout_seconds must be positive"):
        DatabaseSettings(timeout_seconds=timeout)


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        LedgerConfig.model_validate({"database": {"pth": "typo.db"}})


# ============================================================================
# load_config
# ============================================================================


def test_load_valid_config(write_config, valid_config_dict):
    config = load_config(write_config(valid_config_dict))

    assert config.database.path == valid_config_dict["database"]["path"]
    assert config.database.timeout_seconds == 2.5
    assert config.logging.verbose is True


def test_load_config_accepts_str_path(write_config, valid_config_dict):
    config = load_config(str(write_config(valid_config_dict)))

    assert config.logging.verbose is True


def test_load_partial_config_fills_defaults(write_config):
    config = load_config(write_config({"logging": {"verbose": True}}))

    assert config.database.path == DEFAULT_DB_PATH


def test_load_empty_mapping_gives_defaults(write_config):
    config = load_config(write_config("{}\n"))

    assert config == LedgerConfig()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigFileNotFoundError, match="Configuration file not found"):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml(write_config):
    with pytest.raises(ConfigValidationError, match="Invalid YAML syntax"):
        load_config(write_config("database: [unclosed"))


def test_empty_file(write_config):
    with pytest.raises(ConfigValidationError, match="Configuration file is empty"):
        load_config(write_config(""))


def test_validation_errors_list_locations(write_config):
    config_file = write_config({"database": {"path": "", "timeout_seconds": -2}})

    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(config_file)

    message = str(exc_info.value)
    assert "database.path" in message
    assert "database.timeout_seconds" in message


def test_non_mapping_yaml_rejected(write_config):
    with pytest.raises(ConfigValidationError):
        load_config(write_config("- just\n- a list\n"))


def test_config_errors_share_base_class(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.yaml")


def test_example_config_is_valid():
    from pathlib import Path

    example = Path(__file__).parent.parent / "examples" / "version_ledger.config.yaml"

    config = load_config(example)

    assert config.database.path == DEFAULT_DB_PATH


# ============================================================================
# build_database
# ============================================================================


def test_build_database(valid_config_dict):
    config = LedgerConfig.model_validate(valid_config_dict)

    db = build_database(config)

    assert isinstance(db, SQLiteDatabase)
    assert db.db_path == valid_config_dict["database"]["path"]
    assert db.timeout == 2.5
