"""
MongoDB component store.

Collection layout (one document per component):

    {
        "_id": "<component id>",
        "typeReference": "...",
        "model": {...},
        "aliases": ["a", "b"],
        "version": 1,
        "createdAt": "...",
        "updatedAt": "..."
    }

A unique multikey index on ``aliases`` keeps alias ownership exclusive.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo.errors import DuplicateKeyError

from iorgate.components.base import ComponentRecord
from iorgate.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


class MongoComponentStore:
    """
    Stores records in a MongoDB collection through motor.

    Usage:
        store = MongoComponentStore("mongodb://localhost:27017", "iorgate")
        await store.connect()
    """

    name = "mongo"

    def __init__(
        self,
        mongodb_url: str,
        database_name: str = "iorgate",
        collection_name: str = "components",
    ):
        """
        Initialize store.

        Args:
            mongodb_url: MongoDB connection URL
            database_name: Database name
            collection_name: Collection holding component documents
        """
        self._mongodb_url = mongodb_url
        self._database_name = database_name
        self._collection_name = collection_name
        self._client = None
        self._collection = None

    async def connect(self) -> None:
        """Connect to MongoDB and ensure the alias index."""
        from motor.motor_asyncio import AsyncIOMotorClient

        self._client = AsyncIOMotorClient(self._mongodb_url)
        self._collection = self._client[self._database_name][self._collection_name]
        await self._collection.create_index("aliases", unique=True, sparse=True)
        logger.info(
            f"[store] Connected to MongoDB: {self._database_name}.{self._collection_name}"
        )

    async def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
            self._collection = None

    async def _ensure_connected(self) -> Any:
        if self._collection is None:
            await self.connect()
        return self._collection

    async def read(self, component_id: str) -> ComponentRecord | None:
        collection = await self._ensure_connected()
        doc = await collection.find_one({"_id": component_id})
        return self._to_record(doc) if doc is not None else None

    async def insert(self, record: ComponentRecord) -> None:
        collection = await self._ensure_connected()
        try:
            await collection.insert_one(self._to_document(record))
        except DuplicateKeyError as e:
            raise Conflict(f"Component '{record.id}' or one of its aliases already exists") from e

    async def replace(self, record: ComponentRecord) -> None:
        collection = await self._ensure_connected()
        result = await collection.replace_one({"_id": record.id}, self._to_document(record))
        if result.matched_count == 0:
            raise NotFound(f"Component '{record.id}' does not exist")

    async def delete(self, component_id: str) -> bool:
        collection = await self._ensure_connected()
        result = await collection.delete_one({"_id": component_id})
        return result.deleted_count > 0

    async def lookup_alias(self, name: str) -> str | None:
        collection = await self._ensure_connected()
        doc = await collection.find_one({"aliases": name}, projection={"_id": 1})
        return doc["_id"] if doc is not None else None

    async def add_alias(self, component_id: str, name: str) -> None:
        collection = await self._ensure_connected()
        try:
            result = await collection.update_one(
                {"_id": component_id},
                {"$addToSet": {"aliases": name}},
            )
        except DuplicateKeyError as e:
            raise Conflict(f"Alias '{name}' already belongs to another component") from e
        if result.matched_count == 0:
            raise NotFound(f"Component '{component_id}' does not exist")

    async def count(self) -> int:
        collection = await self._ensure_connected()
        return await collection.count_documents({})

    @staticmethod
    def _to_document(record: ComponentRecord) -> dict[str, Any]:
        doc = record.to_document()
        doc["_id"] = doc.pop("id")
        # sparse unique index: an empty array would index as null
        if not doc["aliases"]:
            del doc["aliases"]
        return doc

    @staticmethod
    def _to_record(doc: dict[str, Any]) -> ComponentRecord:
        data = dict(doc)
        data["id"] = data.pop("_id")
        return ComponentRecord.model_validate(data)
