"""
Configuration schema models for Version Ledger.

Pydantic v2 models validating version_ledger.config.yaml. Every section is
optional; an empty mapping yields the defaults.

Models:
    DatabaseSettings: Where the ledger database lives and how long to wait on locks
    LoggingSettings: Log verbosity
    LedgerConfig: Root configuration model (validates entire YAML)
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DB_PATH = "./output/versions.db"


class DatabaseSettings(BaseModel):
    """
    Backing store settings.

    Attributes:
        path: SQLite file path, or ":memory:"
        timeout_seconds: Seconds to wait on a locked database before failing
    """

    model_config = ConfigDict(extra="forbid")

    path: str = DEFAULT_DB_PATH
    timeout_seconds: float = 5.0

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate path is non-empty."""
        if not v or v.isspace():
            raise ValueError("path cannot be empty")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got: {v}")
        return v


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    verbose: bool = False


class LedgerConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
