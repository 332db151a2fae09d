"""
In-memory component store for tests and throwaway instances.
"""

from __future__ import annotations

from iorgate.components.base import ComponentRecord
from iorgate.errors import Conflict, NotFound


class MemoryComponentStore:
    """
    Stores records in process memory.

    Usage:
        store = MemoryComponentStore()
        await store.insert(record)
        record = await store.read("doc-1")
    """

    name = "memory"

    def __init__(self) -> None:
        self._records: dict[str, ComponentRecord] = {}
        self._aliases: dict[str, str] = {}  # alias -> id

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def read(self, component_id: str) -> ComponentRecord | None:
        record = self._records.get(component_id)
        return record.model_copy(deep=True) if record is not None else None

    async def insert(self, record: ComponentRecord) -> None:
        if record.id in self._records:
            raise Conflict(f"Component '{record.id}' already exists")
        for alias in record.aliases:
            owner = self._aliases.get(alias)
            if owner is not None:
                raise Conflict(f"Alias '{alias}' already belongs to '{owner}'")

        self._records[record.id] = record.model_copy(deep=True)
        for alias in record.aliases:
            self._aliases[alias] = record.id

    async def replace(self, record: ComponentRecord) -> None:
        if record.id not in self._records:
            raise NotFound(f"Component '{record.id}' does not exist")
        self._records[record.id] = record.model_copy(deep=True)

    async def delete(self, component_id: str) -> bool:
        record = self._records.pop(component_id, None)
        if record is None:
            return False
        for alias in record.aliases:
            self._aliases.pop(alias, None)
        return True

    async def lookup_alias(self, name: str) -> str | None:
        return self._aliases.get(name)

    async def add_alias(self, component_id: str, name: str) -> None:
        record = self._records.get(component_id)
        if record is None:
            raise NotFound(f"Component '{component_id}' does not exist")
        owner = self._aliases.get(name)
        if owner is not None and owner != component_id:
            raise Conflict(f"Alias '{name}' already belongs to '{owner}'")

        self._aliases[name] = component_id
        if name not in record.aliases:
            record.aliases.append(name)

    async def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
        self._aliases.clear()
