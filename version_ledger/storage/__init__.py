"""Backing stores and the version table that runs on top of them."""

from .database import TABLE_PREFIX, DatabaseProvider, SQLiteDatabase
from .memory import InMemoryDatabase

__all__ = ["TABLE_PREFIX", "DatabaseProvider", "InMemoryDatabase", "SQLiteDatabase"]
