"""
Component Type Registry.

Maps type references to Component constructors.

Design Principle:
    A creation payload names its type by reference, e.g.
    "ior:esm:/Components/Document". The registry turns that reference
    into a known Component subclass; a payload never gets to supply an
    arbitrary constructor.

Usage:
    registry = ComponentTypeRegistry()
    registry.register(DocumentComponent, "Document")

    cls = registry.get_required("ior:esm:/Components/Document")
    cls = registry.get_required("Document")  # short name
"""

from __future__ import annotations

import logging

from iorgate.addressing import parse_reference
from iorgate.errors import GatewayError, NotFound

from .base import Component

logger = logging.getLogger(__name__)


class ComponentTypeRegistryError(GatewayError):
    """Error in component type registration."""

    kind = "ComponentTypeRegistryError"


def _type_key(type_reference: str) -> str:
    return parse_reference(type_reference).key


class ComponentTypeRegistry:
    """Registry of named Component constructors."""

    def __init__(self) -> None:
        self._types: dict[str, type[Component]] = {}

    def register(self, component_cls: type[Component], *names: str) -> None:
        """
        Register a component type under its type reference and any short names.

        Raises:
            ComponentTypeRegistryError: If a key is already taken by another type
        """
        keys = [_type_key(component_cls.type_reference), *(_type_key(n) for n in names)]
        for key in keys:
            existing = self._types.get(key)
            if existing is not None and existing is not component_cls:
                raise ComponentTypeRegistryError(
                    f"Type key '{key}' already registered to {existing.__name__}"
                )

        for key in keys:
            self._types[key] = component_cls
        logger.info(f"[types] Registered {component_cls.__name__}: {component_cls.type_reference}")

    def get(self, type_reference: str) -> type[Component] | None:
        return self._types.get(_type_key(type_reference))

    def get_required(self, type_reference: str) -> type[Component]:
        """
        Get a constructor by type reference.

        Raises:
            NotFound: If no type is registered under the reference
        """
        component_cls = self.get(type_reference)
        if component_cls is None:
            raise NotFound(f"Unknown component type: {type_reference}")
        return component_cls

    def list_types(self) -> list[str]:
        """List canonical type references."""
        return sorted({cls.type_reference for cls in self._types.values()})

    def __contains__(self, type_reference: str) -> bool:
        return self.get(type_reference) is not None

    def __len__(self) -> int:
        return len(self.list_types())
