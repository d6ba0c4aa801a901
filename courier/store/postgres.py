"""PostgreSQL implementation of the record store."""

from __future__ import annotations

import json

import asyncpg

from .repository import RecordStore
from .sqlite import check_table_name


class PostgresRecordStore(RecordStore):
    """Persist records as JSONB using PostgreSQL."""

    def __init__(self, dsn: str, table: str):
        self._dsn = dsn
        self.table = check_table_name(table)
        self._initialized = False

    async def close(self) -> None:
        """Connections are opened per call; nothing is held open."""
        pass

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            await self._ensure_schema(conn)
            self._initialized = True
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                record_key TEXT PRIMARY KEY,
                body JSONB NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """
        )

    # ------------------------------------------------------------------
    async def put(self, key: str, record: dict) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                f"""
                INSERT INTO {self.table} (record_key, body, updated_at)
                VALUES ($1, $2::jsonb, now())
                ON CONFLICT (record_key) DO UPDATE
                SET body = EXCLUDED.body, updated_at = EXCLUDED.updated_at
                """,
                key,
                json.dumps(record),
            )
        finally:
            await conn.close()

    async def get(self, key: str) -> dict | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                f"SELECT body FROM {self.table} WHERE record_key = $1", key
            )
        finally:
            await conn.close()
        if not row:
            return None
        return json.loads(row["body"])

    async def delete(self, key: str) -> bool:
        conn = await self._connect()
        try:
            status = await conn.execute(
                f"DELETE FROM {self.table} WHERE record_key = $1", key
            )
        finally:
            await conn.close()
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return status.split()[-1] != "0"

    async def list_records(self) -> list[dict]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(
                f"SELECT body FROM {self.table} ORDER BY updated_at"
            )
        finally:
            await conn.close()
        return [json.loads(r["body"]) for r in rows]
