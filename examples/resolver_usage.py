"""
ComponentResolver Usage Examples.

Shows how the pieces fit together without the HTTP layer:

    ┌──────────────┐      ┌───────────────────┐      ┌──────────────────┐
    │   Address    │ ──▶  │ ComponentResolver │ ──▶  │ PersistenceBridge│
    │  (parse_url) │      │ (resolve/create)  │      │ (CRUD + aliases) │
    └──────────────┘      └───────────────────┘      └──────────────────┘
                                   │
                                   ▼
                          ┌──────────────────┐
                          │  ComponentStore  │
                          │ (Memory/File/DB) │
                          └──────────────────┘
"""

import asyncio


# =============================================================================
# Example 1: Component lifecycle with the in-memory store
# =============================================================================


async def example_lifecycle():
    """Create, read by alias, update, delete."""
    from iorgate.addressing import parse_url
    from iorgate.bridge import PersistenceBridge
    from iorgate.components import create_default_type_registry
    from iorgate.runtime import ComponentResolver
    from iorgate.storage import MemoryComponentStore

    resolver = ComponentResolver(
        store=MemoryComponentStore(),
        types=create_default_type_registry(),
    )
    bridge = PersistenceBridge(resolver)

    created = await bridge.create(
        {
            "typeReference": "ior:esm:/Components/Document",
            "model": {"title": "Release notes"},
            "id": "notes",
            "aliases": ["latest"],
        }
    )
    print(f"Created: {created['id']} aliases={created['aliases']}")

    snapshot = await bridge.read(parse_url("/UDE/latest"))
    print(f"Read via alias: {snapshot['model']}")

    updated = await bridge.update(parse_url("/UDE/notes"), {"model": {"title": "v2"}})
    print(f"Updated to version {updated['version']}: {updated['model']}")

    print(await bridge.delete(parse_url("/UDE/notes")))


# =============================================================================
# Example 2: File-backed store (development)
# =============================================================================


async def example_file_store():
    """Components survive restarts when stored as JSON files."""
    from iorgate.addressing import parse_url
    from iorgate.bridge import PersistenceBridge
    from iorgate.components import create_default_type_registry
    from iorgate.runtime import ComponentResolver
    from iorgate.storage import FileComponentStore

    store = FileComponentStore("data/ude")
    await store.connect()

    resolver = ComponentResolver(store=store, types=create_default_type_registry())
    bridge = PersistenceBridge(resolver)

    await bridge.create({"typeReference": "Generic", "model": {"count": 1}, "id": "counter"})

    # A fresh resolver (as after a restart) loads the same component from disk
    fresh = PersistenceBridge(ComponentResolver(store=store, types=create_default_type_registry()))
    print(await fresh.read(parse_url("/UDE/counter")))

    await fresh.delete(parse_url("/UDE/counter"))


# =============================================================================
# Example 3: Resolving script references
# =============================================================================


async def example_script_reference():
    """ior:esm references resolve to files under the web root."""
    from iorgate.addressing import parse_url
    from iorgate.components import create_default_type_registry
    from iorgate.runtime import ComponentResolver, StaticResourceLoader
    from iorgate.storage import MemoryComponentStore

    resolver = ComponentResolver(
        store=MemoryComponentStore(),
        types=create_default_type_registry(),
        static_loader=StaticResourceLoader("www"),
    )

    resource = await resolver.load(parse_url("/ior:esm:/Components/Generic"))
    print(f"Redirect target: {resource.relative_url()}")


if __name__ == "__main__":
    asyncio.run(example_lifecycle())
    asyncio.run(example_file_store())
    asyncio.run(example_script_reference())
