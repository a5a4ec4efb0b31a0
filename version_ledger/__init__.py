"""
Version Ledger - per-feature schema versions for media databases.

Records one integer version per (feature, instance) pair so that each
component stored in a shared media database can detect and migrate data
written under an older format.
"""

from version_ledger.storage.version_table import (
    VERSION_UNSET,
    Feature,
    VersionRecord,
    get_version,
    list_versions,
    remove_version,
    set_version,
)

__all__ = [
    "VERSION_UNSET",
    "Feature",
    "VersionRecord",
    "get_version",
    "list_versions",
    "remove_version",
    "set_version",
]
