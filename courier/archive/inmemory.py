"""In-memory archive for testing."""

from __future__ import annotations

from typing import Dict, List, Optional

from .base import BaseArchive


class InMemoryArchive(BaseArchive):
    def __init__(self) -> None:
        self._objects: Dict[str, str] = {}

    async def store(self, key: str, body: str) -> None:
        self._objects[key] = body

    async def read(self, key: str) -> Optional[str]:
        return self._objects.get(key)

    async def list_keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._objects if k.startswith(prefix))
