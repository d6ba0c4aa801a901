"""Record store abstraction: one logical table per entity kind."""

from __future__ import annotations

from typing import Protocol


class RecordStore(Protocol):
    """Protocol for key-value record persistence backends.

    Writes are whole-record overwrites; concurrent writers on one key race
    and the last write wins.
    """

    table: str

    async def put(self, key: str, record: dict) -> None:
        """Create or overwrite the record stored under ``key``."""

    async def get(self, key: str) -> dict | None:
        """Return the record stored under ``key`` or ``None``."""

    async def delete(self, key: str) -> bool:
        """Remove ``key``; ``False`` when nothing was stored."""

    async def list_records(self) -> list[dict]:
        """Return every record in the table."""

    async def close(self) -> None:
        """Release backend resources."""
