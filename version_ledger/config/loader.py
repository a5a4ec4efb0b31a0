"""
Configuration loader for Version Ledger.

Loads version_ledger.config.yaml, validates it with the Pydantic models in
config.schema and builds the configured DatabaseProvider.

Functions:
    load_config: Load and validate a YAML configuration file
    build_database: Create the SQLiteDatabase described by a LedgerConfig
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from version_ledger.exceptions import ConfigFileNotFoundError, ConfigValidationError
from version_ledger.storage.database import SQLiteDatabase

from .schema import LedgerConfig

DEFAULT_CONFIG_FILENAME = "version_ledger.config.yaml"


def load_config(config_path: str | Path) -> LedgerConfig:
    """
    Load version_ledger.config.yaml and validate it.

    Args:
        config_path: Path to the YAML file (relative or absolute)

    Returns:
        LedgerConfig with defaults filled in for omitted sections

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist
        ConfigValidationError: If YAML is invalid, the file is empty, or
                               schema validation fails

    Example:
        >>> config = load_config("examples/version_ledger.config.yaml")
        >>> config.database.path
        './output/versions.db'

    Security:
        Uses yaml.safe_load() to prevent code injection.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    try:
        return LedgerConfig.model_validate(raw_config)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            error_messages.append(f"  - {loc}: {msg}")

        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + "\n".join(error_messages)
        ) from e


def build_database(config: LedgerConfig) -> SQLiteDatabase:
    """Create the SQLiteDatabase described by ``config.database``."""
    return SQLiteDatabase(
        config.database.path, timeout=config.database.timeout_seconds
    )
