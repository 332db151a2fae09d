"""
Components and their persistence.

- Component: typed, addressable entity with a validated model
- PersistenceManager: per-component durable state owner
- ComponentTypeRegistry: type reference -> constructor
"""

from .base import Component, ComponentRecord, FreeformModel, PersistenceManager
from .builtin import DocumentComponent, GenericComponent, create_default_type_registry
from .registry import ComponentTypeRegistry, ComponentTypeRegistryError

__all__ = [
    "Component",
    "ComponentRecord",
    "ComponentTypeRegistry",
    "ComponentTypeRegistryError",
    "DocumentComponent",
    "FreeformModel",
    "GenericComponent",
    "PersistenceManager",
    "create_default_type_registry",
]
