"""
Tests for the persistence bridge.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from iorgate.addressing import parse_url
from iorgate.bridge import DELETE_ACK
from iorgate.errors import Conflict, MalformedPayload, MalformedReference, NotFound


class TestCreate:
    """Tests for PersistenceBridge.create."""

    @pytest.mark.asyncio
    async def test_create_then_read(self, bridge, sample_payload):
        created = await bridge.create(sample_payload)

        assert created["id"] == "X"
        assert created["aliases"] == ["a"]
        assert created["model"] == {"foo": 1, "bar": 2}
        assert await bridge.read(parse_url("/UDE/X")) == created

    @pytest.mark.asyncio
    async def test_id_from_address(self, bridge, sample_payload):
        del sample_payload["id"]

        created = await bridge.create(sample_payload, parse_url("/UDE/from-path"))

        assert created["id"] == "from-path"

    @pytest.mark.asyncio
    async def test_id_mismatch(self, bridge, sample_payload, store):
        with pytest.raises(MalformedPayload):
            await bridge.create(sample_payload, parse_url("/UDE/other"))
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_generated_id(self, bridge, sample_payload):
        del sample_payload["id"]

        created = await bridge.create(sample_payload, parse_url("/UDE"))

        assert len(created["id"]) == 32
        assert await bridge.read(parse_url(f"/UDE/{created['id']}")) == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["a/b", "ior:ude:x", "/"])
    async def test_invalid_id(self, bridge, sample_payload, bad_id):
        sample_payload["id"] = bad_id

        with pytest.raises(MalformedPayload):
            await bridge.create(sample_payload)

    @pytest.mark.asyncio
    async def test_missing_type_reference_registers_nothing(self, bridge, sample_payload, store, resolver):
        del sample_payload["typeReference"]

        with pytest.raises(MalformedPayload):
            await bridge.create(sample_payload)

        assert await store.count() == 0
        assert resolver.get_live("X") is None
        with pytest.raises(NotFound):
            await bridge.read(parse_url("/UDE/X"))

    @pytest.mark.asyncio
    async def test_invalid_model_for_type(self, bridge, store):
        with pytest.raises(MalformedPayload):
            await bridge.create({"typeReference": "Document", "model": {"body": "x"}, "id": "d"})
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_alias_conflict_leaves_nothing(self, bridge, sample_payload, store):
        await bridge.create(sample_payload)

        with pytest.raises(Conflict):
            await bridge.create(
                {"typeReference": "Generic", "model": {}, "id": "Y", "aliases": ["fresh", "a"]}
            )

        assert await store.read("Y") is None
        assert await store.lookup_alias("fresh") is None

    @pytest.mark.asyncio
    async def test_duplicate_id(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        with pytest.raises(Conflict):
            await bridge.create({**sample_payload, "aliases": []})

    @pytest.mark.asyncio
    async def test_duplicate_aliases_in_payload(self, bridge, sample_payload):
        sample_payload["aliases"] = ["a", "a", "b"]

        created = await bridge.create(sample_payload)

        assert created["aliases"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_store_failure_propagates_unchanged(self, bridge, sample_payload, store, resolver):
        error = OSError("disk full")
        store.insert = AsyncMock(side_effect=error)

        with pytest.raises(OSError) as exc_info:
            await bridge.create(sample_payload)

        assert exc_info.value is error
        assert resolver.get_live("X") is None
        # reservation released
        async with resolver.reserve("X", "a"):
            pass

    @pytest.mark.asyncio
    async def test_concurrent_creates_single_winner(self, bridge, sample_payload, store):
        original_insert = store.insert

        async def slow_insert(record):
            await asyncio.sleep(0.01)
            await original_insert(record)

        store.insert = slow_insert

        results = await asyncio.gather(
            *(bridge.create(dict(sample_payload)) for _ in range(5)),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, dict)]
        conflicts = [r for r in results if isinstance(r, Conflict)]
        assert len(successes) == 1
        assert len(conflicts) == 4
        assert await store.count() == 1


class TestUpdate:
    """Tests for PersistenceBridge.update."""

    @pytest.mark.asyncio
    async def test_replaces_not_merges(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        updated = await bridge.update(parse_url("/UDE/X"), {"model": {"foo": 9}})

        assert updated["model"] == {"foo": 9}
        assert (await bridge.read(parse_url("/UDE/a")))["model"] == {"foo": 9}

    @pytest.mark.asyncio
    async def test_ignores_aliases(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        updated = await bridge.update(parse_url("/UDE/X"), {"model": {}, "aliases": ["new"]})

        assert updated["aliases"] == ["a"]
        with pytest.raises(NotFound):
            await bridge.read(parse_url("/UDE/new"))

    @pytest.mark.asyncio
    async def test_type_mismatch(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        with pytest.raises(MalformedPayload):
            await bridge.update(
                parse_url("/UDE/X"),
                {"typeReference": "Document", "model": {"title": "t"}},
            )

    @pytest.mark.asyncio
    async def test_missing_model(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        with pytest.raises(MalformedPayload):
            await bridge.update(parse_url("/UDE/X"), {"foo": 9})

    @pytest.mark.asyncio
    async def test_missing_component(self, bridge):
        with pytest.raises(NotFound):
            await bridge.update(parse_url("/UDE/nope"), {"model": {}})


class TestDelete:
    """Tests for PersistenceBridge.delete."""

    @pytest.mark.asyncio
    async def test_delete_finality(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        assert await bridge.delete(parse_url("/UDE/a")) == DELETE_ACK

        for address in ("/UDE/X", "/UDE/a"):
            with pytest.raises(NotFound):
                await bridge.read(parse_url(address))

    @pytest.mark.asyncio
    async def test_id_reusable_after_delete(self, bridge, sample_payload):
        await bridge.create(sample_payload)
        await bridge.delete(parse_url("/UDE/X"))

        recreated = await bridge.create({**sample_payload, "model": {"new": True}})

        assert recreated["model"] == {"new": True}

    @pytest.mark.asyncio
    async def test_delete_during_alias_load_stays_deleted(self, bridge, sample_payload, store, resolver):
        await bridge.create(sample_payload)
        resolver.evict(resolver.get_live("X"))

        entered = asyncio.Event()
        release = asyncio.Event()
        original_read = store.read

        async def blocking_read(component_id):
            record = await original_read(component_id)
            entered.set()
            await release.wait()
            return record

        store.read = blocking_read
        reading = asyncio.create_task(bridge.read(parse_url("/UDE/a")))
        await entered.wait()
        deleting = asyncio.create_task(bridge.delete(parse_url("/UDE/X")))
        for _ in range(5):
            await asyncio.sleep(0)
        release.set()

        await reading
        assert await deleting == DELETE_ACK
        store.read = original_read

        assert resolver.get_live("X") is None
        assert resolver.get_live("a") is None
        with pytest.raises(NotFound):
            await bridge.read(parse_url("/UDE/a"))
        with pytest.raises(NotFound):
            await bridge.read(parse_url("/UDE/X"))

    @pytest.mark.asyncio
    async def test_delete_missing(self, bridge):
        with pytest.raises(NotFound):
            await bridge.delete(parse_url("/UDE/nope"))

    @pytest.mark.asyncio
    async def test_delete_root(self, bridge):
        with pytest.raises(MalformedReference):
            await bridge.delete(parse_url("/UDE"))


class TestAddAlias:
    """Tests for PersistenceBridge.add_alias."""

    @pytest.mark.asyncio
    async def test_adds_and_resolves(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        snapshot = await bridge.add_alias(parse_url("/UDE/X"), {"aliases": ["b", "a"]})

        assert snapshot["aliases"] == ["a", "b"]
        assert await bridge.read(parse_url("/UDE/b")) == snapshot

    @pytest.mark.asyncio
    async def test_conflict_with_other_component(self, bridge, sample_payload):
        await bridge.create(sample_payload)
        await bridge.create({"typeReference": "Generic", "model": {}, "id": "Y"})

        with pytest.raises(Conflict):
            await bridge.add_alias(parse_url("/UDE/Y"), {"aliases": ["a"]})

    @pytest.mark.asyncio
    async def test_empty_alias_list(self, bridge, sample_payload):
        await bridge.create(sample_payload)

        with pytest.raises(MalformedPayload):
            await bridge.add_alias(parse_url("/UDE/X"), {"aliases": []})
