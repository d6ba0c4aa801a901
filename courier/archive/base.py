"""Base interface for the write-once snapshot archive."""

from __future__ import annotations

import abc
import uuid
from typing import List, Optional


def new_archive_key(prefix: str) -> str:
    """Return a fresh object key under ``prefix``."""
    return f"{prefix}/{uuid.uuid4()}.json"


class BaseArchive(metaclass=abc.ABCMeta):
    """Blob namespace holding one object per workflow invocation.

    Keys are generated fresh per call, so ``store`` does not look for
    existing content at the key.
    """

    @abc.abstractmethod
    async def store(self, key: str, body: str) -> None:
        """Write ``body`` under ``key``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """Return the body stored under ``key`` or ``None``."""
        raise NotImplementedError

    @abc.abstractmethod
    async def list_keys(self, prefix: str = "") -> List[str]:
        """Return stored keys starting with ``prefix``, sorted."""
        raise NotImplementedError
