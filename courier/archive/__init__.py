"""Archive factory."""

from __future__ import annotations

from typing import Optional

from ..config import CourierConfig, load_config
from .base import BaseArchive, new_archive_key
from .filesystem import FileSystemArchive
from .inmemory import InMemoryArchive


def get_archive(config: Optional[CourierConfig] = None) -> BaseArchive:
    """Factory function to get the configured archive writer."""

    config = config or load_config()
    archive_conf = config.archive

    if archive_conf.backend == "inmemory":
        return InMemoryArchive()
    elif archive_conf.backend == "filesystem":
        return FileSystemArchive(archive_conf.root)
    else:
        raise ValueError(f"Unsupported archive backend: {archive_conf.backend}")


__all__ = [
    "BaseArchive",
    "FileSystemArchive",
    "InMemoryArchive",
    "get_archive",
    "new_archive_key",
]
