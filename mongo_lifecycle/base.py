"""Interfaces of the collaborators the backup engine consumes."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping


class BaseCollectionHandle(ABC):
    """Async view of a single collection."""

    name: str

    @abstractmethod
    async def find(self) -> List[Dict[str, Any]]:
        """Return every document in the collection."""
        ...

    @abstractmethod
    async def insert_many(self, documents: List[Dict[str, Any]], ordered: bool = False) -> int:
        """Insert documents, returning the number actually inserted."""
        ...

    @abstractmethod
    async def drop(self) -> None:
        ...

    @abstractmethod
    async def create_index(self, keys: Mapping[str, Any], **options: Any) -> str:
        ...

    @abstractmethod
    async def list_indexes(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def stats(self) -> Dict[str, Any]:
        ...


class BaseDatabaseHandle(ABC):
    """Async view of a database on one cluster."""

    name: str

    @abstractmethod
    async def list_collections(self) -> List[str]:
        """Return collection names in discovery order."""
        ...

    @abstractmethod
    def collection(self, name: str) -> BaseCollectionHandle:
        ...


class BaseClusterRegistry(ABC):
    """Resolves cluster names to live database handles."""

    @abstractmethod
    def get_database(self, cluster: str, database: str) -> BaseDatabaseHandle:
        """Resolve a database handle.

        Resolution errors are the registry's own and propagate unchanged.
        """
        ...


class BaseConfigStore(ABC):
    """Durable key-value settings store."""

    @abstractmethod
    def get_setting(self, key: str) -> Any:
        ...

    @abstractmethod
    def set_setting(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def save(self) -> None:
        """Persist all settings."""
        ...
