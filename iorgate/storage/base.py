"""
Component store protocol.

Stores hold ComponentRecords keyed by canonical id plus an alias index.
They are the durable layer under PersistenceManager; they know nothing
about component types or live instances.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from iorgate.components.base import ComponentRecord


@runtime_checkable
class ComponentStore(Protocol):
    """Durable storage for component records."""

    @property
    def name(self) -> str:
        """Backend name (memory, file, mongo)."""
        ...

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def read(self, component_id: str) -> ComponentRecord | None:
        """Get a record by canonical id."""
        ...

    async def insert(self, record: ComponentRecord) -> None:
        """Insert a new record and its aliases. Raises Conflict if the id exists."""
        ...

    async def replace(self, record: ComponentRecord) -> None:
        """Overwrite an existing record. Raises NotFound if missing."""
        ...

    async def delete(self, component_id: str) -> bool:
        """Delete a record and its aliases. Returns False if it did not exist."""
        ...

    async def lookup_alias(self, name: str) -> str | None:
        """Get the canonical id an alias points to."""
        ...

    async def add_alias(self, component_id: str, name: str) -> None:
        """Bind an alias to an existing record."""
        ...

    async def count(self) -> int:
        ...
