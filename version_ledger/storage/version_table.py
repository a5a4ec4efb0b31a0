"""
Version ledger for media database components.

Records one integer schema version per (feature, instance_uid) pair so each
component of the media database (offline downloads, cache metadata, ...) can
be versioned independently of the database that contains it. Callers compare
the recorded version with the one they expect and migrate their own tables
when the two differ.

The backing table is created lazily by the first set_version(). Reads and
removes probe for the table first and treat its absence as "nothing
recorded", so a freshly created database is always a valid ledger.

Example usage:
    >>> from version_ledger.storage.database import SQLiteDatabase
    >>> from version_ledger.storage.version_table import Feature, get_version, set_version
    >>> db = SQLiteDatabase("./output/versions.db")
    >>> get_version(db, Feature.CACHE_CONTENT_METADATA, "cache1")
    -1
    >>> set_version(db, Feature.CACHE_CONTENT_METADATA, "cache1", 2)
    >>> get_version(db, Feature.CACHE_CONTENT_METADATA, "cache1")
    2
"""

import logging
import sqlite3
from dataclasses import dataclass
from enum import IntEnum

from ..exceptions import DatabaseIOError
from ..utils.logging import log_with_context
from .database import TABLE_PREFIX, DatabaseProvider

logger = logging.getLogger(__name__)

# Returned by get_version() when no version is recorded
VERSION_UNSET = -1


class Feature(IntEnum):
    """
    Features that own a version in the ledger.

    Values are stored as plain integers. Components outside this package must
    use values >= EXTERNAL so they never collide with the features below.
    """

    OFFLINE = 0
    CACHE_CONTENT_METADATA = 1
    CACHE_FILE_METADATA = 2
    EXTERNAL = 1000


TABLE_NAME = TABLE_PREFIX + "Versions"

COLUMN_FEATURE = "feature"
COLUMN_INSTANCE_UID = "instance_uid"
COLUMN_VERSION = "version"

WHERE_FEATURE_AND_INSTANCE_UID_EQUALS = (
    f"{COLUMN_FEATURE} = ? AND {COLUMN_INSTANCE_UID} = ?"
)

SQL_CREATE_TABLE_IF_NOT_EXISTS = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        {COLUMN_FEATURE} INTEGER NOT NULL,
        {COLUMN_INSTANCE_UID} TEXT NOT NULL,
        {COLUMN_VERSION} INTEGER NOT NULL,
        PRIMARY KEY ({COLUMN_FEATURE}, {COLUMN_INSTANCE_UID})
    )
"""


@dataclass(frozen=True)
class VersionRecord:
    """One row of the ledger."""

    feature: int
    instance_uid: str
    version: int


def set_version(
    db: DatabaseProvider, feature: int, instance_uid: str, version: int
) -> None:
    """
    Set the version of an instance of a feature.

    Creates the ledger table if needed, then writes the row, fully replacing
    any version already recorded for the same (feature, instance_uid).

    Args:
        db: Store to update
        feature: A Feature, or an integer >= Feature.EXTERNAL
        instance_uid: Identifier of the feature instance (e.g. a cache directory)
        version: The version to record

    Raises:
        DatabaseIOError: If the store fails to create the table or write the row
    """
    context = {
        "feature": int(feature),
        "instance_uid": instance_uid,
        "version": version,
    }
    try:
        db.execute(SQL_CREATE_TABLE_IF_NOT_EXISTS)
        db.upsert(
            TABLE_NAME,
            {
                COLUMN_FEATURE: int(feature),
                COLUMN_INSTANCE_UID: instance_uid,
                COLUMN_VERSION: version,
            },
        )
    except sqlite3.Error as e:
        log_with_context(
            logger, logging.ERROR, "Failed to set version", context, exc_info=True
        )
        raise DatabaseIOError(
            f"Failed to set version for feature {int(feature)}, "
            f"instance {instance_uid!r}: {e}"
        ) from e

    log_with_context(logger, logging.DEBUG, "Version set", context)


def remove_version(db: DatabaseProvider, feature: int, instance_uid: str) -> None:
    """
    Remove the version of an instance of a feature.

    A no-op when nothing is recorded, including when the ledger table has
    never been created. The table is not created by this call.

    Args:
        db: Store to update
        feature: A Feature, or an integer >= Feature.EXTERNAL
        instance_uid: Identifier of the feature instance

    Raises:
        DatabaseIOError: If the store fails to probe the table or delete the row
    """
    context = {"feature": int(feature), "instance_uid": instance_uid}
    try:
        if not db.table_exists(TABLE_NAME):
            return
        deleted = db.delete(
            TABLE_NAME,
            WHERE_FEATURE_AND_INSTANCE_UID_EQUALS,
            _feature_and_instance_uid_arguments(feature, instance_uid),
        )
    except sqlite3.Error as e:
        log_with_context(
            logger, logging.ERROR, "Failed to remove version", context, exc_info=True
        )
        raise DatabaseIOError(
            f"Failed to remove version for feature {int(feature)}, "
            f"instance {instance_uid!r}: {e}"
        ) from e

    if deleted:
        log_with_context(logger, logging.DEBUG, "Version removed", context)


def get_version(db: DatabaseProvider, feature: int, instance_uid: str) -> int:
    """
    Return the version of an instance of a feature.

    Args:
        db: Store to query
        feature: A Feature, or an integer >= Feature.EXTERNAL
        instance_uid: Identifier of the feature instance

    Returns:
        int: The recorded version, or VERSION_UNSET if none is recorded

    Raises:
        DatabaseIOError: If the store fails to probe the table or run the query
    """
    try:
        if not db.table_exists(TABLE_NAME):
            return VERSION_UNSET
        rows = db.query(
            TABLE_NAME,
            [COLUMN_VERSION],
            WHERE_FEATURE_AND_INSTANCE_UID_EQUALS,
            _feature_and_instance_uid_arguments(feature, instance_uid),
        )
    except sqlite3.Error as e:
        log_with_context(
            logger,
            logging.ERROR,
            "Failed to get version",
            {"feature": int(feature), "instance_uid": instance_uid},
            exc_info=True,
        )
        raise DatabaseIOError(
            f"Failed to get version for feature {int(feature)}, "
            f"instance {instance_uid!r}: {e}"
        ) from e

    if not rows:
        return VERSION_UNSET
    if len(rows) > 1:
        # The primary key makes this unreachable on a well-formed table
        logger.warning(
            f"{len(rows)} versions recorded for feature {int(feature)}, "
            f"instance {instance_uid!r}; using the first"
        )
    return rows[0][0]


def list_versions(db: DatabaseProvider, feature: int | None = None) -> list[VersionRecord]:
    """
    Return every recorded version, optionally restricted to one feature.

    Records are ordered by (feature, instance_uid). Returns an empty list if the
    ledger table has never been created; the table is not created by this call.

    Raises:
        DatabaseIOError: If the store fails to probe the table or run the query
    """
    where, params = None, ()
    if feature is not None:
        where, params = f"{COLUMN_FEATURE} = ?", (int(feature),)

    try:
        if not db.table_exists(TABLE_NAME):
            return []
        rows = db.query(
            TABLE_NAME,
            [COLUMN_FEATURE, COLUMN_INSTANCE_UID, COLUMN_VERSION],
            where,
            params,
            order_by=f"{COLUMN_FEATURE}, {COLUMN_INSTANCE_UID}",
        )
    except sqlite3.Error as e:
        logger.error(f"Failed to list versions: {e}", exc_info=True)
        raise DatabaseIOError(f"Failed to list versions: {e}") from e

    return [VersionRecord(*row) for row in rows]


def _feature_and_instance_uid_arguments(feature: int, instance_uid: str) -> tuple:
    return (int(feature), instance_uid)
