"""SQLite implementation of the record store."""

from __future__ import annotations

import asyncio
import json
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .repository import RecordStore

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_table_name(table: str) -> str:
    if not _TABLE_NAME.match(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return table


class SQLiteRecordStore(RecordStore):
    """Persist records as JSON text using SQLite."""

    def __init__(self, db_path: str | Path, table: str):
        self.db_path = str(db_path)
        self.table = check_table_name(table)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                record_key TEXT PRIMARY KEY,
                body TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()
        return cur.rowcount

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)

    # ------------------------------------------------------------------
    # Store API
    async def put(self, key: str, record: dict) -> None:
        await asyncio.to_thread(
            self._execute,
            f"""
            INSERT INTO {self.table} (record_key, body, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(record_key) DO UPDATE SET body = excluded.body,
                updated_at = excluded.updated_at
            """,
            key,
            json.dumps(record),
            datetime.now(timezone.utc).isoformat(),
        )

    async def get(self, key: str) -> dict | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT body FROM {self.table} WHERE record_key = ?",
            key,
        )
        if not row:
            return None
        return json.loads(row["body"])

    async def delete(self, key: str) -> bool:
        deleted = await asyncio.to_thread(
            self._execute,
            f"DELETE FROM {self.table} WHERE record_key = ?",
            key,
        )
        return deleted > 0

    async def list_records(self) -> list[dict]:
        rows = await asyncio.to_thread(
            self._fetchall,
            f"SELECT body FROM {self.table} ORDER BY updated_at",
        )
        return [json.loads(r["body"]) for r in rows]
