"""
Persistence Bridge.

Translates lifecycle operations on an address into calls against the
resolved component's PersistenceManager, and produces the response
payload.

Operations:
    read(ref)                -> snapshot
    create(body, ref)        -> snapshot
    update(ref, body)        -> snapshot
    delete(ref)              -> {"delete": "ok"}
    add_alias(ref, body)     -> snapshot

Error policy:
    Nothing here is retried and nothing is caught. Failures from the
    resolver, stores and persistence managers propagate unchanged to
    the binding layer, which alone maps them to HTTP responses.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from iorgate.addressing import UDE_PROTOCOL, AddressReference
from iorgate.config import AliasPayload, ComponentPayload, UpdatePayload
from iorgate.errors import MalformedPayload
from iorgate.runtime import ComponentResolver

logger = logging.getLogger(__name__)

DELETE_ACK: dict[str, str] = {"delete": "ok"}


class PersistenceBridge:
    """
    Component lifecycle over addresses.

    Example:
        bridge = PersistenceBridge(resolver)

        snapshot = await bridge.create(
            {"typeReference": "Generic", "model": {"foo": 1}, "id": "X", "aliases": ["a"]}
        )
        assert await bridge.read(parse_url("/UDE/a")) == snapshot
        await bridge.delete(parse_url("/UDE/X"))
    """

    def __init__(self, resolver: ComponentResolver):
        self._resolver = resolver

    @property
    def resolver(self) -> ComponentResolver:
        return self._resolver

    async def read(self, ref: AddressReference) -> dict[str, Any]:
        component = await self._resolver.resolve_existing(ref.with_protocol(UDE_PROTOCOL))
        return component.persistence.snapshot()

    async def create(
        self,
        body: Any,
        ref: AddressReference | None = None,
    ) -> dict[str, Any]:
        """
        Create a component from a payload.

        The id comes from the body, else from the address, else a UUID4
        is generated. Aliases are staged before the durable create so a
        failed alias never leaves a persisted component behind.

        Args:
            body: Raw JSON body
            ref: Address the request was made on (None for the namespace root)

        Returns:
            Snapshot of the created component
        """
        payload: ComponentPayload = self._resolver.validate_structure(body, ComponentPayload)
        component_id = self._component_id(payload, ref)
        aliases = list(dict.fromkeys(payload.aliases))

        async with self._resolver.reserve(component_id, *aliases):
            component = await self._resolver.instantiate_new(payload.type_reference, component_id)
            component.replace_model(payload.model)
            for alias in aliases:
                await component.persistence.add_alias(alias)
            await component.persistence.create()
            self._resolver.register(component)

        logger.info(f"[bridge] Created {component!r}")
        return component.persistence.snapshot()

    async def update(self, ref: AddressReference, body: Any) -> dict[str, Any]:
        """Replace the component's model. Aliases are left untouched."""
        component = await self._resolver.resolve_existing(ref.with_protocol(UDE_PROTOCOL))
        payload: UpdatePayload = self._resolver.validate_structure(body, UpdatePayload)

        if payload.type_reference is not None:
            requested = self._resolver.load_class(payload.type_reference)
            if requested is not type(component):
                raise MalformedPayload(
                    f"typeReference {payload.type_reference} does not match "
                    f"{component.type_reference}"
                )

        await component.persistence.update(payload.model)
        return component.persistence.snapshot()

    async def delete(self, ref: AddressReference) -> dict[str, str]:
        component = await self._resolver.resolve_existing(ref.with_protocol(UDE_PROTOCOL))
        async with self._resolver.id_lock(component.id):
            await component.persistence.delete()
            self._resolver.evict(component)
        logger.info(f"[bridge] Deleted {component.id}")
        return dict(DELETE_ACK)

    async def add_alias(self, ref: AddressReference, body: Any) -> dict[str, Any]:
        """Register additional aliases for an existing component."""
        component = await self._resolver.resolve_existing(ref.with_protocol(UDE_PROTOCOL))
        payload: AliasPayload = self._resolver.validate_structure(body, AliasPayload)
        aliases = [a for a in dict.fromkeys(payload.aliases) if a not in component.aliases]

        async with self._resolver.reserve(*aliases):
            for alias in aliases:
                await component.persistence.add_alias(alias)
            self._resolver.register(component)

        return component.persistence.snapshot()

    @staticmethod
    def _component_id(payload: ComponentPayload, ref: AddressReference | None) -> str:
        body_id = payload.id.strip("/") if payload.id is not None else None
        path_id = ref.identifier if ref is not None and not ref.is_root else None

        if body_id is not None and path_id is not None and body_id != path_id:
            raise MalformedPayload(f"Body id '{body_id}' does not match address '{path_id}'")

        component_id = body_id if body_id is not None else path_id
        if component_id is None:
            component_id = uuid.uuid4().hex
            logger.info(f"[bridge] No id supplied, generated {component_id}")
        elif not component_id or "/" in component_id or component_id.startswith("ior:"):
            raise MalformedPayload(f"Invalid component id: {component_id!r}")
        return component_id
