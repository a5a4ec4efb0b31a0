#!/usr/bin/env python3
"""
Check a cache index's recorded schema version and migrate it when stale.

This script demonstrates how a cache component uses the ledger:
- Read the version recorded for its instance
- Create or migrate its own table when the version differs
- Record the new version once the migration has been written

Usage:
    python examples/code-examples/migrate_cache_index.py ./output/media.db cache1
"""

import sqlite3
import sys

from version_ledger import VERSION_UNSET, Feature, get_version, set_version
from version_ledger.exceptions import DatabaseIOError
from version_ledger.storage import SQLiteDatabase

CACHE_INDEX_VERSION = 2


def ensure_cache_index(db_path: str, instance_uid: str) -> None:
    """Bring the cache index table for ``instance_uid`` up to CACHE_INDEX_VERSION."""
    db = SQLiteDatabase(db_path)
    table = f"ExoPlayerCacheIndex{instance_uid}"

    version = get_version(db, Feature.CACHE_CONTENT_METADATA, instance_uid)
    if version == CACHE_INDEX_VERSION:
        print(f"Cache index {instance_uid} is current (v{version})")
        return

    if version == VERSION_UNSET:
        print(f"No cache index recorded for {instance_uid}, creating v{CACHE_INDEX_VERSION}")
    else:
        print(f"Cache index {instance_uid} is v{version}, rebuilding as v{CACHE_INDEX_VERSION}")

    with sqlite3.connect(db_path) as conn:
        conn.execute(f'DROP TABLE IF EXISTS "{table}"')
        conn.execute(
            f'CREATE TABLE "{table}" '
            "(id INTEGER PRIMARY KEY NOT NULL, key TEXT NOT NULL, metadata BLOB NOT NULL)"
        )

    set_version(db, Feature.CACHE_CONTENT_METADATA, instance_uid, CACHE_INDEX_VERSION)
    print(f"Cache index {instance_uid} recorded as v{CACHE_INDEX_VERSION}")


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    try:
        ensure_cache_index(sys.argv[1], sys.argv[2])
    except DatabaseIOError as e:
        print(f"Error: {e}")
        sys.exit(2)
