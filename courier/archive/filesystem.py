"""Filesystem-backed archive."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

from .base import BaseArchive


class FileSystemArchive(BaseArchive):
    """Store each object as a file below ``root``; ``/`` in keys maps to directories."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Archive key escapes the archive root: {key!r}")
        return path

    def _write(self, key: str, body: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def _list(self, prefix: str) -> List[str]:
        if not self.root.exists():
            return []
        keys = (
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file()
        )
        return sorted(k for k in keys if k.startswith(prefix))

    async def store(self, key: str, body: str) -> None:
        await asyncio.to_thread(self._write, key, body)

    async def read(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def list_keys(self, prefix: str = "") -> List[str]:
        return await asyncio.to_thread(self._list, prefix)
