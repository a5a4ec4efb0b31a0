"""
Custom exceptions for Version Ledger.

All exceptions inherit from VersionLedgerError so callers can catch every
ledger-specific failure with a single except clause.

Exception Hierarchy:
    VersionLedgerError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    └── DatabaseError
        └── DatabaseIOError

Usage:
    from version_ledger.exceptions import DatabaseIOError

    try:
        set_version(db, Feature.OFFLINE, "downloads", 3)
    except DatabaseIOError as e:
        logger.error(f"Could not record version: {e}")
"""


class VersionLedgerError(Exception):
    """Base exception for all Version Ledger errors."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(VersionLedgerError):
    """
    Base class for configuration-related errors.

    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/version_ledger.config.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (YAML syntax or schema validation failed).

    Example:
        raise ConfigValidationError("database.path: path cannot be empty")
    """

    pass


# ============================================================================
# Database Errors
# ============================================================================


class DatabaseError(VersionLedgerError):
    """
    Base class for database-related errors.

    Should be caught and result in exit code 2 (database error).
    """

    pass


class DatabaseIOError(DatabaseError):
    """
    The backing store rejected a create, upsert, delete or query.

    Raised by every ledger operation in place of the underlying driver error,
    which is kept as ``__cause__``. The ledger never retries; each failure is
    fatal to the call that raised it.

    Example:
        raise DatabaseIOError("Failed to set version: disk I/O error") from e
    """

    pass
