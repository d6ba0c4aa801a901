"""In-memory implementation of the record store."""

from __future__ import annotations

import copy
from typing import Dict

from .repository import RecordStore


class InMemoryRecordStore(RecordStore):
    """Store records in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Records are copied on the way in and
    out so callers cannot mutate stored state.
    """

    def __init__(self, table: str) -> None:
        self.table = table
        self._records: Dict[str, dict] = {}

    async def put(self, key: str, record: dict) -> None:
        self._records[key] = copy.deepcopy(record)

    async def get(self, key: str) -> dict | None:
        record = self._records.get(key)
        return copy.deepcopy(record) if record is not None else None

    async def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    async def list_records(self) -> list[dict]:
        return [copy.deepcopy(r) for r in self._records.values()]

    async def close(self) -> None:
        pass
