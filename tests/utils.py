"""Test utilities for mongo-lifecycle tests."""

from typing import Any, Dict, List, Mapping, Optional

from mongo_lifecycle._storage import ClusterNotFoundError
from mongo_lifecycle.base import (
    BaseClusterRegistry,
    BaseCollectionHandle,
    BaseConfigStore,
    BaseDatabaseHandle,
)


def primary_index() -> Dict[str, Any]:
    return {"v": 2, "key": {"_id": 1}, "name": "_id_"}


class FakeCollection(BaseCollectionHandle):
    """In-memory collection; ``fail_on`` maps an operation name to the exception it raises."""

    def __init__(
        self,
        name: str,
        documents: Optional[List[Dict[str, Any]]] = None,
        indexes: Optional[List[Dict[str, Any]]] = None,
        fail_on: Optional[Dict[str, Exception]] = None,
    ):
        self.name = name
        self.documents = list(documents or [])
        self.indexes = list(indexes) if indexes is not None else [primary_index()]
        self.fail_on = fail_on or {}
        self.created_indexes: List[Dict[str, Any]] = []
        self.drop_count = 0

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    async def find(self) -> List[Dict[str, Any]]:
        self._check("find")
        return [dict(doc) for doc in self.documents]

    async def insert_many(self, documents: List[Dict[str, Any]], ordered: bool = False) -> int:
        self._check("insert_many")
        self.documents.extend(dict(doc) for doc in documents)
        return len(documents)

    async def drop(self) -> None:
        self._check("drop")
        self.drop_count += 1
        self.documents = []
        self.indexes = [primary_index()]

    async def create_index(self, keys: Mapping[str, Any], **options: Any) -> str:
        self._check("create_index")
        index = {"key": dict(keys), **options}
        self.created_indexes.append(index)
        self.indexes.append(index)
        return options.get("name", "")

    async def list_indexes(self) -> List[Dict[str, Any]]:
        self._check("list_indexes")
        return [dict(index) for index in self.indexes]

    async def stats(self) -> Dict[str, Any]:
        self._check("stats")
        return {"ns": self.name, "count": len(self.documents)}


class FakeDatabase(BaseDatabaseHandle):
    def __init__(self, name: str, collections: Optional[List[FakeCollection]] = None):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {c.name: c for c in collections or []}

    async def list_collections(self) -> List[str]:
        return list(self.collections)

    def collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


class FakeRegistry(BaseClusterRegistry):
    def __init__(self, clusters: List[str]):
        self.clusters = set(clusters)
        self.databases: Dict[tuple, FakeDatabase] = {}

    def add_database(self, cluster: str, database: FakeDatabase) -> FakeDatabase:
        self.clusters.add(cluster)
        self.databases[(cluster, database.name)] = database
        return database

    def get_database(self, cluster: str, database: str) -> FakeDatabase:
        if cluster not in self.clusters:
            raise ClusterNotFoundError(cluster)
        key = (cluster, database)
        if key not in self.databases:
            self.databases[key] = FakeDatabase(database)
        return self.databases[key]


class FakeConfigStore(BaseConfigStore):
    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings = dict(settings or {})
        self.save_count = 0

    def get_setting(self, key: str) -> Any:
        return self.settings.get(key)

    def set_setting(self, key: str, value: Any) -> None:
        self.settings[key] = value

    async def save(self) -> None:
        self.save_count += 1


def make_shop_database(name: str = "shop") -> FakeDatabase:
    """Database with two populated collections and a unique secondary index."""
    users = FakeCollection(
        "users",
        documents=[
            {"_id": 1, "name": "John", "email": "john@example.com"},
            {"_id": 2, "name": "Jane", "email": "jane@example.com"},
        ],
        indexes=[
            primary_index(),
            {"v": 2, "key": {"email": 1}, "name": "email_1", "unique": True},
        ],
    )
    orders = FakeCollection(
        "orders",
        documents=[{"_id": i, "user": 1, "total": i * 10} for i in range(1, 4)],
    )
    return FakeDatabase(name, [users, orders])
