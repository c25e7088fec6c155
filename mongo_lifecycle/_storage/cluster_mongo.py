"""MongoDB cluster registry backed by pymongo's asyncio client."""

from typing import Any, Dict, List, Mapping

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import BulkWriteError

from ..base import BaseClusterRegistry, BaseCollectionHandle, BaseDatabaseHandle
from .._utils import logger


class ClusterNotFoundError(KeyError):
    def __init__(self, cluster: str):
        super().__init__(cluster)
        self.cluster = cluster

    def __str__(self) -> str:
        return f"Cluster not connected: {self.cluster}"


class MongoCollectionHandle(BaseCollectionHandle):
    def __init__(self, collection: AsyncCollection):
        self._collection = collection
        self.name = collection.name

    async def find(self) -> List[Dict[str, Any]]:
        return await self._collection.find({}).to_list(length=None)

    async def insert_many(self, documents: List[Dict[str, Any]], ordered: bool = False) -> int:
        """Insert documents; with ``ordered=False`` rejected documents do not block the rest."""
        try:
            result = await self._collection.insert_many(documents, ordered=ordered)
            return len(result.inserted_ids)
        except BulkWriteError as e:
            inserted = e.details.get("nInserted", 0)
            logger.warning(
                f"Insert into {self.name} rejected {len(e.details.get('writeErrors', []))} "
                f"documents ({inserted} inserted)"
            )
            return inserted

    async def drop(self) -> None:
        await self._collection.drop()

    async def create_index(self, keys: Mapping[str, Any], **options: Any) -> str:
        return await self._collection.create_index(list(keys.items()), **options)

    async def list_indexes(self) -> List[Dict[str, Any]]:
        cursor = await self._collection.list_indexes()
        return [dict(index) for index in await cursor.to_list(length=None)]

    async def stats(self) -> Dict[str, Any]:
        return await self._collection.database.command("collStats", self.name)


class MongoDatabaseHandle(BaseDatabaseHandle):
    def __init__(self, database: AsyncDatabase):
        self._database = database
        self.name = database.name

    async def list_collections(self) -> List[str]:
        return await self._database.list_collection_names()

    def collection(self, name: str) -> MongoCollectionHandle:
        return MongoCollectionHandle(self._database[name])


class MongoClusterRegistry(BaseClusterRegistry):
    """Named MongoDB clusters, one async client each."""

    def __init__(self):
        self._clients: Dict[str, AsyncMongoClient] = {}

    def add_cluster(self, name: str, uri: str, **client_kwargs: Any) -> None:
        if name in self._clients:
            raise ValueError(f"Cluster already registered: {name}")
        self._clients[name] = AsyncMongoClient(uri, **client_kwargs)
        logger.info(f"Registered cluster: {name}")

    def list_clusters(self) -> List[str]:
        return list(self._clients)

    def get_database(self, cluster: str, database: str) -> MongoDatabaseHandle:
        client = self._clients.get(cluster)
        if client is None:
            raise ClusterNotFoundError(cluster)
        return MongoDatabaseHandle(client[database])

    async def close(self) -> None:
        for name, client in self._clients.items():
            await client.close()
            logger.debug(f"Closed connection to cluster: {name}")
        self._clients.clear()
