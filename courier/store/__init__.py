"""Record store layer for courier entities."""

from __future__ import annotations

from typing import Optional

from ..config import CourierConfig, load_config
from .inmemory import InMemoryRecordStore
from .postgres import PostgresRecordStore
from .repository import RecordStore
from .sqlite import SQLiteRecordStore


def get_record_store(
    table: str,
    database_url: Optional[str] = None,
    config: Optional[CourierConfig] = None,
) -> RecordStore:
    """Factory function to obtain the record store for one entity table.

    The backend is selected from ``database_url``, provided explicitly or
    taken from configuration. When no database is configured an in-memory
    store is returned.
    """

    config = config or load_config()
    database_url = database_url or config.store.database_url

    if not database_url:
        return InMemoryRecordStore(table)

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        return SQLiteRecordStore(path, table)
    elif database_url.startswith("postgres://") or database_url.startswith(
        "postgresql://"
    ):
        return PostgresRecordStore(database_url, table)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")


__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "SQLiteRecordStore",
    "PostgresRecordStore",
    "get_record_store",
]
