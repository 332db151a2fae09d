"""
Tests for component stores.

Tests for:
- MemoryComponentStore
- FileComponentStore
- MongoComponentStore (against mocked motor collections)
- create_store
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr
from pymongo.errors import DuplicateKeyError

from iorgate.components import ComponentRecord
from iorgate.config import AppSettings
from iorgate.errors import Conflict, NotFound
from iorgate.storage import (
    FileComponentStore,
    MemoryComponentStore,
    MongoComponentStore,
    create_store,
)


def _record(component_id="X", aliases=None, model=None):
    return ComponentRecord(
        id=component_id,
        type_reference="ior:esm:/Components/Generic",
        model=model if model is not None else {"foo": 1},
        aliases=aliases or [],
    )


# =============================================================================
# Shared behaviour (memory + file)
# =============================================================================


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryComponentStore()
    return FileComponentStore(tmp_path / "ude")


class TestStoreContract:
    """Behaviour every local store must share."""

    @pytest.mark.asyncio
    async def test_insert_and_read(self, any_store):
        await any_store.connect()
        await any_store.insert(_record(aliases=["a"]))

        record = await any_store.read("X")
        assert record.model == {"foo": 1}
        assert await any_store.lookup_alias("a") == "X"
        assert await any_store.count() == 1

    @pytest.mark.asyncio
    async def test_read_missing(self, any_store):
        await any_store.connect()

        assert await any_store.read("missing") is None
        assert await any_store.lookup_alias("missing") is None

    @pytest.mark.asyncio
    async def test_insert_duplicate_id(self, any_store):
        await any_store.connect()
        await any_store.insert(_record())

        with pytest.raises(Conflict):
            await any_store.insert(_record())

    @pytest.mark.asyncio
    async def test_insert_duplicate_alias(self, any_store):
        await any_store.connect()
        await any_store.insert(_record("X", aliases=["a"]))

        with pytest.raises(Conflict):
            await any_store.insert(_record("Y", aliases=["a"]))
        assert await any_store.read("Y") is None

    @pytest.mark.asyncio
    async def test_replace(self, any_store):
        await any_store.connect()
        await any_store.insert(_record(model={"foo": 1, "bar": 2}))

        await any_store.replace(_record(model={"foo": 9}))

        assert (await any_store.read("X")).model == {"foo": 9}

    @pytest.mark.asyncio
    async def test_replace_missing(self, any_store):
        await any_store.connect()

        with pytest.raises(NotFound):
            await any_store.replace(_record())

    @pytest.mark.asyncio
    async def test_delete_removes_aliases(self, any_store):
        await any_store.connect()
        await any_store.insert(_record(aliases=["a", "b"]))

        assert await any_store.delete("X") is True
        assert await any_store.read("X") is None
        assert await any_store.lookup_alias("a") is None
        assert await any_store.lookup_alias("b") is None
        assert await any_store.delete("X") is False

    @pytest.mark.asyncio
    async def test_add_alias(self, any_store):
        await any_store.connect()
        await any_store.insert(_record("X"))
        await any_store.insert(_record("Y", aliases=["y"]))

        await any_store.add_alias("X", "x")

        assert await any_store.lookup_alias("x") == "X"
        assert (await any_store.read("X")).aliases == ["x"]
        with pytest.raises(Conflict):
            await any_store.add_alias("X", "y")
        with pytest.raises(NotFound):
            await any_store.add_alias("missing", "z")


# =============================================================================
# FileComponentStore Tests
# =============================================================================


class TestFileComponentStore:
    """File-specific behaviour."""

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        store = FileComponentStore(tmp_path)
        await store.connect()
        await store.insert(_record(aliases=["a"]))
        await store.close()

        reopened = FileComponentStore(tmp_path)
        await reopened.connect()

        assert (await reopened.read("X")).model == {"foo": 1}
        assert await reopened.lookup_alias("a") == "X"

    @pytest.mark.asyncio
    async def test_ids_are_quoted_for_filenames(self, tmp_path):
        store = FileComponentStore(tmp_path)
        await store.connect()
        await store.insert(_record("a b:c"))

        assert (tmp_path / "records" / "a%20b%3Ac.json").exists()
        assert await store.read("a b:c") is not None

    @pytest.mark.asyncio
    async def test_count_without_directory(self, tmp_path):
        store = FileComponentStore(tmp_path / "missing")

        assert await store.count() == 0


# =============================================================================
# MongoComponentStore Tests
# =============================================================================


@pytest.fixture
def mongo_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.replace_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
    collection.count_documents = AsyncMock(return_value=3)
    return collection


@pytest.fixture
def mongo_store(mongo_collection):
    store = MongoComponentStore("mongodb://localhost:27017")
    store._collection = mongo_collection
    return store


class TestMongoComponentStore:
    """Tests for MongoComponentStore with a mocked collection."""

    @pytest.mark.asyncio
    async def test_insert_maps_id(self, mongo_store, mongo_collection):
        await mongo_store.insert(_record(aliases=["a"]))

        doc = mongo_collection.insert_one.call_args.args[0]
        assert doc["_id"] == "X"
        assert "id" not in doc
        assert doc["aliases"] == ["a"]
        assert doc["typeReference"] == "ior:esm:/Components/Generic"

    @pytest.mark.asyncio
    async def test_insert_omits_empty_aliases(self, mongo_store, mongo_collection):
        await mongo_store.insert(_record())

        doc = mongo_collection.insert_one.call_args.args[0]
        assert "aliases" not in doc

    @pytest.mark.asyncio
    async def test_insert_duplicate(self, mongo_store, mongo_collection):
        mongo_collection.insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(Conflict):
            await mongo_store.insert(_record())

    @pytest.mark.asyncio
    async def test_read(self, mongo_store, mongo_collection):
        mongo_collection.find_one.return_value = {
            "_id": "X",
            "typeReference": "ior:esm:/Components/Generic",
            "model": {"foo": 1},
            "version": 4,
            "createdAt": "2026-01-01T00:00:00Z",
            "updatedAt": "2026-01-02T00:00:00Z",
        }

        record = await mongo_store.read("X")

        assert record.id == "X"
        assert record.version == 4
        assert record.aliases == []
        mongo_collection.find_one.assert_awaited_with({"_id": "X"})

    @pytest.mark.asyncio
    async def test_replace_missing(self, mongo_store, mongo_collection):
        mongo_collection.replace_one.return_value = MagicMock(matched_count=0)

        with pytest.raises(NotFound):
            await mongo_store.replace(_record())

    @pytest.mark.asyncio
    async def test_lookup_alias(self, mongo_store, mongo_collection):
        mongo_collection.find_one.return_value = {"_id": "X"}

        assert await mongo_store.lookup_alias("a") == "X"
        mongo_collection.find_one.assert_awaited_with({"aliases": "a"}, projection={"_id": 1})

    @pytest.mark.asyncio
    async def test_add_alias_conflict(self, mongo_store, mongo_collection):
        mongo_collection.update_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(Conflict):
            await mongo_store.add_alias("X", "a")

    @pytest.mark.asyncio
    async def test_delete_and_count(self, mongo_store, mongo_collection):
        assert await mongo_store.delete("X") is True
        assert await mongo_store.count() == 3


# =============================================================================
# create_store Tests
# =============================================================================


class TestCreateStore:
    """Tests for backend selection."""

    def test_memory_default(self):
        assert isinstance(create_store(AppSettings()), MemoryComponentStore)

    def test_file(self, tmp_path):
        store = create_store(AppSettings(store_backend="file", store_dir=str(tmp_path)))

        assert isinstance(store, FileComponentStore)

    def test_mongo(self):
        settings = AppSettings(
            store_backend="mongo",
            mongodb_url=SecretStr("mongodb://db:27017"),
            mongodb_database="test",
        )

        store = create_store(settings)

        assert isinstance(store, MongoComponentStore)
        assert store.name == "mongo"
