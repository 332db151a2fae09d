"""
Component base classes.

A Component is an addressable entity whose state (its ``model``) is
persisted through a PersistenceManager it owns exclusively.

Design Principle:
    Components are typed, not duck-typed. Each subclass declares a
    pydantic ``Model`` used to validate state on create and update, and
    a ``type_reference`` under which it is registered in the
    ComponentTypeRegistry.

Lifecycle:
    component = DocumentComponent.new("doc-1", store)
    component.replace_model({"title": "Hello"})
    await component.persistence.add_alias("welcome")   # staged
    await component.persistence.create()               # durable, aliases included
    await component.persistence.update({"title": "Bye"})
    await component.persistence.delete()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from iorgate.errors import Conflict, MalformedPayload, NotFound

if TYPE_CHECKING:
    from iorgate.storage.base import ComponentStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Get current UTC time with timezone awareness."""
    return datetime.now(UTC)


class ComponentRecord(BaseModel):
    """
    Durable representation of one component.

    Serialized with camelCase keys; this is also the snapshot shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type_reference: str = Field(..., alias="typeReference")
    model: dict[str, Any] = Field(default_factory=dict)
    aliases: list[str] = Field(default_factory=list)
    version: int = 1
    created_at: datetime = Field(default_factory=_utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utc_now, alias="updatedAt")

    def to_document(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys and sorted aliases."""
        data = self.model_dump(mode="json", by_alias=True)
        data["aliases"] = sorted(self.aliases)
        return data


class FreeformModel(BaseModel):
    """Model accepting any JSON object."""

    model_config = ConfigDict(extra="allow")


class Component:
    """
    Base class for all persisted components.

    Subclasses set ``type_reference`` and may narrow ``Model``.
    """

    type_reference: ClassVar[str] = "ior:esm:/Components/Component"
    Model: ClassVar[type[BaseModel]] = FreeformModel

    def __init__(self, record: ComponentRecord, store: ComponentStore, *, persisted: bool):
        self._record = record
        self.persistence = PersistenceManager(self, store, persisted=persisted)

    @classmethod
    def new(cls, component_id: str, store: ComponentStore) -> Component:
        """Instantiate a component that has not been persisted yet."""
        record = ComponentRecord(id=component_id, type_reference=cls.type_reference)
        return cls(record, store, persisted=False)

    @classmethod
    def from_record(cls, record: ComponentRecord, store: ComponentStore) -> Component:
        """Rehydrate a component loaded from the store."""
        return cls(record, store, persisted=True)

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def aliases(self) -> frozenset[str]:
        return frozenset(self._record.aliases)

    @property
    def model(self) -> dict[str, Any]:
        return dict(self._record.model)

    @property
    def record(self) -> ComponentRecord:
        return self._record

    @classmethod
    def validate_model(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Validate state against this type's Model.

        Raises:
            MalformedPayload: If validation fails
        """
        try:
            validated = cls.Model.model_validate(data)
        except ValidationError as e:
            raise MalformedPayload(
                f"Invalid model for {cls.__name__}",
                errors=e.errors(include_url=False, include_context=False),
            ) from e
        return validated.model_dump(mode="json")

    def replace_model(self, data: dict[str, Any]) -> None:
        """Replace the in-memory model. Not durable until create/update."""
        self._record = self._record.model_copy(update={"model": self.validate_model(data)})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, aliases={sorted(self.aliases)!r})"


class PersistenceManager:
    """
    Owns durable state for exactly one Component.

    Aliases added before ``create()`` are staged and written together
    with the record, so a failed alias check never leaves a durable
    component behind. After ``create()`` aliases write through.
    """

    def __init__(self, component: Component, store: ComponentStore, *, persisted: bool):
        self._component = component
        self._store = store
        self._persisted = persisted
        # one mutation at a time; version bumps read the record under it
        self._lock = asyncio.Lock()

    @property
    def persisted(self) -> bool:
        return self._persisted

    async def add_alias(self, name: str) -> None:
        """
        Register an alias for the component.

        Raises:
            MalformedPayload: If the alias is empty or contains '/'
            Conflict: If the alias names another component
        """
        component = self._component
        if not name or "/" in name or name.startswith("ior:"):
            raise MalformedPayload(f"Invalid alias: {name!r}")

        async with self._lock:
            if name == component.id or name in component.aliases:
                return

            owner = await self._store.lookup_alias(name)
            if owner is not None and owner != component.id:
                raise Conflict(f"Alias '{name}' already belongs to '{owner}'")
            if await self._store.read(name) is not None:
                raise Conflict(f"Alias '{name}' is the id of an existing component")

            if self._persisted:
                await self._store.add_alias(component.id, name)
                logger.info(f"[persistence] Added alias '{name}' -> {component.id}")

            aliases = [*component.record.aliases, name]
            component._record = component.record.model_copy(update={"aliases": aliases})

    async def create(self) -> None:
        """
        Durably create the component, including staged aliases.

        Raises:
            Conflict: If the component already exists
        """
        async with self._lock:
            if self._persisted:
                raise Conflict(f"Component '{self._component.id}' already created")

            now = _utc_now()
            record = self._component.record.model_copy(
                update={"created_at": now, "updated_at": now}
            )
            await self._store.insert(record)
            self._component._record = record
            self._persisted = True
        logger.info(
            f"[persistence] Created {record.id} | "
            f"type={record.type_reference} | "
            f"aliases={sorted(record.aliases)}"
        )

    async def update(self, data: dict[str, Any]) -> None:
        """
        Replace the model and persist it. The in-memory state only
        changes once the store write succeeds.
        """
        model = self._component.validate_model(data)
        async with self._lock:
            self._require_persisted()
            current = self._component.record
            record = current.model_copy(
                update={
                    "model": model,
                    "version": current.version + 1,
                    "updated_at": _utc_now(),
                }
            )
            await self._store.replace(record)
            self._component._record = record
        logger.info(f"[persistence] Updated {record.id} | version={record.version}")

    async def delete(self) -> None:
        """Delete the record and every alias."""
        async with self._lock:
            self._require_persisted()
            deleted = await self._store.delete(self._component.id)
            self._persisted = False
        if not deleted:
            raise NotFound(f"Component '{self._component.id}' no longer exists")
        logger.info(f"[persistence] Deleted {self._component.id}")

    def snapshot(self) -> dict[str, Any]:
        """Canonical JSON-serializable representation."""
        return self._component.record.to_document()

    def _require_persisted(self) -> None:
        if not self._persisted:
            raise NotFound(f"Component '{self._component.id}' is not persisted")
