"""
Configuration and payload schemas for iorgate.

Pydantic models for service settings and for the request bodies
accepted on the /UDE namespace.

Security:
    The MongoDB URL uses SecretStr so credentials embedded in it are
    not logged. Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ComponentPayload(BaseModel):
    """
    Creation payload.

    Example:
        {
            "typeReference": "ior:esm:/Components/Document",
            "model": {"title": "Hello"},
            "id": "doc-1",
            "aliases": ["welcome"]
        }
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type_reference: str = Field(..., alias="typeReference", min_length=1)
    model: dict[str, Any] = Field(..., description="Component state, validated per type")
    id: str | None = Field(default=None, min_length=1)
    aliases: list[str] = Field(default_factory=list)


class UpdatePayload(BaseModel):
    """Update payload. Only ``model`` is required; the model is replaced whole."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    model: dict[str, Any]
    type_reference: str | None = Field(default=None, alias="typeReference")


class AliasPayload(BaseModel):
    """Alias registration payload."""

    aliases: list[str] = Field(..., min_length=1)


class AppSettings(BaseModel):
    """
    Application settings model.

    Populated from IORGATE_* environment variables by
    ``iorgate.app.dependencies.get_settings``.
    """

    # Service identity
    service_name: str = "iorgate"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Static content
    web_root: str = Field(default="www", description="Directory served at / and used for ior:esm lookups")

    # Persistence
    store_backend: Literal["memory", "file", "mongo"] = "memory"
    store_dir: str = Field(default="data/ude", description="Directory for the file store")
    mongodb_url: SecretStr = Field(default=SecretStr("mongodb://localhost:27017"))
    mongodb_database: str = "iorgate"
    mongodb_collection: str = "components"
