"""
Component stores.

Start simple, scale as needed:
- Testing: MemoryComponentStore
- Development: FileComponentStore (JSON files)
- Production: MongoComponentStore (motor)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ComponentStore
from .file import FileComponentStore
from .memory import MemoryComponentStore
from .mongo import MongoComponentStore

if TYPE_CHECKING:
    from iorgate.config import AppSettings


def create_store(settings: AppSettings) -> ComponentStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "file":
        return FileComponentStore(settings.store_dir)
    if settings.store_backend == "mongo":
        return MongoComponentStore(
            mongodb_url=settings.mongodb_url.get_secret_value(),
            database_name=settings.mongodb_database,
            collection_name=settings.mongodb_collection,
        )
    return MemoryComponentStore()


__all__ = [
    "ComponentStore",
    "FileComponentStore",
    "MemoryComponentStore",
    "MongoComponentStore",
    "create_store",
]
