"""SQLAlchemy adapter package for sfdml."""

from __future__ import annotations

from .engine import StartupError, configured_engine, is_started, shutdown, startup
from .mappings import TABLE_BY_TYPE, create_all_tables, metadata
from .store import SqlAlchemyRecordStore

__all__ = [
    "TABLE_BY_TYPE",
    "SqlAlchemyRecordStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
