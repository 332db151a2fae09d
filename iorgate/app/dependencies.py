"""
Dependency Injection for iorgate.

Provides the process-wide service objects:
    settings -> store -> type registry -> ComponentResolver

The resolver is built once and handed to route handlers through
FastAPI's Depends, so tests can swap it with
``app.dependency_overrides[get_resolver]``.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from iorgate.bridge import PersistenceBridge
from iorgate.components import create_default_type_registry
from iorgate.config import AppSettings
from iorgate.runtime import ComponentResolver, StaticResourceLoader
from iorgate.storage import create_store

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return AppSettings(
        # Service
        service_name=os.getenv("IORGATE_SERVICE_NAME", "iorgate"),
        environment=os.getenv("IORGATE_ENVIRONMENT", "development"),
        debug=os.getenv("IORGATE_DEBUG", "false").lower() == "true",
        host=os.getenv("IORGATE_HOST", "0.0.0.0"),
        port=int(os.getenv("IORGATE_PORT", "8080")),
        # Static content
        web_root=os.getenv("IORGATE_WEB_ROOT", "www"),
        # Persistence
        store_backend=os.getenv("IORGATE_STORE_BACKEND", "memory"),
        store_dir=os.getenv("IORGATE_STORE_DIR", "data/ude"),
        mongodb_url=os.getenv("IORGATE_MONGODB_URL", "mongodb://localhost:27017"),
        mongodb_database=os.getenv("IORGATE_MONGODB_DATABASE", "iorgate"),
        mongodb_collection=os.getenv("IORGATE_MONGODB_COLLECTION", "components"),
    )


# Global instance (initialized on first access)
_resolver: Optional[ComponentResolver] = None


def build_resolver(settings: AppSettings) -> ComponentResolver:
    """Wire a resolver from settings."""
    return ComponentResolver(
        store=create_store(settings),
        types=create_default_type_registry(),
        static_loader=StaticResourceLoader(settings.web_root),
    )


def get_resolver() -> ComponentResolver:
    """
    Get the process-wide ComponentResolver.

    Creates it on first call.
    """
    global _resolver
    if _resolver is None:
        settings = get_settings()
        _resolver = build_resolver(settings)
        logger.info(
            f"[resolver] ComponentResolver initialized | "
            f"store={settings.store_backend} | "
            f"web_root={settings.web_root}"
        )
    return _resolver


def get_bridge(resolver: ComponentResolver = Depends(get_resolver)) -> PersistenceBridge:
    """Per-request bridge over the shared resolver."""
    return PersistenceBridge(resolver)


async def initialize_services() -> None:
    """
    Initialize services on application startup.

    Called from FastAPI lifespan.
    """
    resolver = get_resolver()
    await resolver.store.connect()


async def shutdown_services() -> None:
    """
    Cleanup services on application shutdown.

    Called from FastAPI lifespan.
    """
    global _resolver
    if _resolver:
        await _resolver.store.close()
        _resolver = None
