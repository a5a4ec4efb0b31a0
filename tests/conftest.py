"""Shared fixtures: every ledger test runs against both store implementations."""

import pytest

from version_ledger.storage.database import SQLiteDatabase
from version_ledger.storage.memory import InMemoryDatabase


@pytest.fixture
def sqlite_db(tmp_path):
    """File-backed SQLite store in a temporary directory."""
    return SQLiteDatabase(tmp_path / "media.db")


@pytest.fixture
def memory_db():
    return InMemoryDatabase()


@pytest.fixture(params=["sqlite", "memory"])
def db(request, tmp_path):
    """A fresh store of each kind."""
    if request.param == "sqlite":
        return SQLiteDatabase(tmp_path / "media.db")
    return InMemoryDatabase()
