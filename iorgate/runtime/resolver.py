"""
Component Resolver.

The Resolver/Loader behind the HTTP layer. It turns AddressReferences
into live Components or static ResourcePaths, and owns the process-wide
registry of live component instances.

Design Principle:
    Reading and creating are separate operations.
    - resolve_existing(ref): find a persisted component, never create
    - instantiate_new(type_ref, id): build an unpersisted instance

Registry lifecycle:
    - Entries are added on first successful resolution or creation
    - Entries are removed on delete (evict)
    - Otherwise they live as long as the process

Concurrency:
    Resolution is single-flight per normalized address, so concurrent
    requests for the same component share one store read and one
    instance. Creation reserves the id and aliases synchronously; a
    concurrent create for a reserved key fails with Conflict.

Usage:
    resolver = ComponentResolver(
        store=MemoryComponentStore(),
        types=create_default_type_registry(),
        static_loader=StaticResourceLoader("www"),
    )

    component = await resolver.load(parse_url("/ior:ude:doc-1"))
    resource = await resolver.load(parse_url("/ior:esm:/Components/Generic"))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from iorgate.addressing import ESM_PROTOCOL, UDE_PROTOCOL, AddressReference
from iorgate.config import ComponentPayload
from iorgate.errors import Conflict, MalformedPayload, MalformedReference, NotFound

from .singleflight import SingleFlight
from .static import ResourcePath, StaticResourceLoader

if TYPE_CHECKING:
    from iorgate.components import Component, ComponentTypeRegistry
    from iorgate.storage import ComponentStore

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


class ComponentResolver:
    """
    Resolves addresses and owns the live component registry.

    Constructed once at startup and injected into the HTTP layer.
    """

    def __init__(
        self,
        *,
        store: ComponentStore,
        types: ComponentTypeRegistry,
        static_loader: StaticResourceLoader | None = None,
    ):
        """
        Initialize resolver.

        Args:
            store: Durable component store
            types: Component constructors by type reference
            static_loader: Locates ior:esm resources (None disables them)
        """
        self._store = store
        self._types = types
        self._static_loader = static_loader
        self._live: dict[str, Component] = {}
        self._flights: SingleFlight[Component] = SingleFlight()
        self._reserved: set[str] = set()
        self._id_locks: dict[str, asyncio.Lock] = {}

    @property
    def store(self) -> ComponentStore:
        return self._store

    @property
    def types(self) -> ComponentTypeRegistry:
        return self._types

    # ==================== Loading ====================

    async def load(self, ref: AddressReference) -> Component | ResourcePath:
        """
        Resolve a reference by its final protocol tag.

        - ``ude``: live Component
        - ``esm`` or no tag: ResourcePath under the web root

        Raises:
            NotFound: If nothing resolves or the protocol is unknown
        """
        protocol = ref.protocol
        if protocol == UDE_PROTOCOL:
            return await self.resolve_existing(ref)

        if protocol in (ESM_PROTOCOL, None):
            if self._static_loader is None:
                raise NotFound(f"Static resources are not configured: {ref}")
            return await self._static_loader.locate(ref.path)

        raise NotFound(f"No loader for protocol '{protocol}': {ref}")

    async def resolve_existing(self, ref: AddressReference) -> Component:
        """
        Resolve a persisted component by id or alias.

        Raises:
            MalformedReference: If the reference is not a ude reference
            NotFound: If no component is stored under the id or alias
        """
        if ref.protocol != UDE_PROTOCOL:
            raise MalformedReference(f"Not a persisted-component reference: {ref}")
        if not ref.identifier:
            raise MalformedReference("Persisted-component reference has no identifier")

        live = self._live.get(ref.identifier)
        if live is not None:
            logger.debug(f"[resolver] Live hit: {ref.identifier}")
            return live

        owner = await self._store.lookup_alias(ref.identifier)
        component_id = owner or ref.identifier
        return await self._flights.do(
            f"{UDE_PROTOCOL}|{component_id}",
            lambda: self._load_component(component_id, ref.identifier),
        )

    async def _load_component(self, component_id: str, name: str) -> Component:
        # held across read and register so a concurrent delete cannot interleave
        async with self.id_lock(component_id):
            live = self._live.get(component_id)
            if live is not None:
                return live

            record = await self._store.read(component_id)
            if record is None:
                raise NotFound(f"No component at address '{name}'")

            component_cls = self._types.get_required(record.type_reference)
            component = component_cls.from_record(record, self._store)
            self.register(component)

        logger.info(f"[resolver] Loaded {component!r} from {self._store.name} store")
        return component

    def id_lock(self, component_id: str) -> asyncio.Lock:
        """
        Lock serializing loads and deletes of one canonical id.

        Deleting under this lock guarantees no in-flight load can put the
        deleted component back into the live registry.
        """
        lock = self._id_locks.get(component_id)
        if lock is None:
            lock = self._id_locks[component_id] = asyncio.Lock()
        return lock

    def load_class(self, type_reference: str) -> type[Component]:
        """
        Resolve a type reference to a Component constructor.

        Raises:
            NotFound: If the type is not registered
        """
        return self._types.get_required(type_reference)

    def validate_structure(
        self,
        body: Any,
        schema: type[P] = ComponentPayload,  # type: ignore[assignment]
    ) -> P:
        """
        Validate an inbound payload's shape.

        Raises:
            MalformedPayload: If the body is not an object or misses fields
        """
        if not isinstance(body, dict):
            raise MalformedPayload("Payload must be a JSON object")
        try:
            return schema.model_validate(body)
        except ValidationError as e:
            raise MalformedPayload(
                f"Invalid {schema.__name__}",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    # ==================== Creation ====================

    @asynccontextmanager
    async def reserve(self, *keys: str) -> AsyncIterator[None]:
        """
        Reserve ids/aliases for the duration of a creation.

        The check-and-reserve step has no suspension point, so two
        requests can never both hold the same key.

        Raises:
            Conflict: If a key is live or reserved by another request
        """
        wanted = set(keys)
        taken = sorted(k for k in wanted if k in self._reserved or k in self._live)
        if taken:
            raise Conflict(f"Address already in use or being created: {', '.join(taken)}")

        self._reserved.update(wanted)
        try:
            yield
        finally:
            self._reserved.difference_update(wanted)

    async def instantiate_new(self, type_reference: str, component_id: str) -> Component:
        """
        Build a new, unpersisted component.

        Raises:
            Conflict: If the id is already stored as an id or alias
            NotFound: If the type is not registered
        """
        component_cls = self.load_class(type_reference)

        if await self._store.read(component_id) is not None:
            raise Conflict(f"Component '{component_id}' already exists")
        owner = await self._store.lookup_alias(component_id)
        if owner is not None:
            raise Conflict(f"'{component_id}' is already an alias of '{owner}'")

        return component_cls.new(component_id, self._store)

    # ==================== Registry ====================

    def register(self, component: Component) -> None:
        """Make a component live under its id and aliases."""
        for name in (component.id, *component.aliases):
            self._live[name] = component

    def evict(self, component: Component) -> None:
        """Remove every live entry pointing at the component."""
        stale = [name for name, live in self._live.items() if live is component]
        for name in stale:
            del self._live[name]
        logger.debug(f"[resolver] Evicted {component.id} ({len(stale)} entries)")

    def get_live(self, name: str) -> Component | None:
        return self._live.get(name)

    @property
    def live_count(self) -> int:
        """Number of distinct live components."""
        return len({id(c) for c in self._live.values()})
