"""
Built-in component types.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .base import Component, FreeformModel
from .registry import ComponentTypeRegistry


class GenericComponent(Component):
    """Component holding an arbitrary JSON object."""

    type_reference = "ior:esm:/Components/Generic"
    Model = FreeformModel


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1)
    body: str = ""
    tags: list[str] = Field(default_factory=list)


class DocumentComponent(Component):
    """Titled text document."""

    type_reference = "ior:esm:/Components/Document"
    Model = DocumentModel


def create_default_type_registry() -> ComponentTypeRegistry:
    """Registry with the built-in types and their short names."""
    registry = ComponentTypeRegistry()
    registry.register(GenericComponent, "Generic")
    registry.register(DocumentComponent, "Document")
    return registry
