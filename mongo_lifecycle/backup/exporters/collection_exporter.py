"""Per-collection export and restore."""

from pathlib import Path
from typing import Any, Dict, List

from ..._utils import logger
from ...base import BaseCollectionHandle, BaseDatabaseHandle
from ..models import CollectionFailure, CollectionRecord, CollectionSuccess, RestoredCollection
from ..utils import COLLECTION_SUFFIX, MANIFEST_FILENAME, dumps_extended, loads_extended, read_text, write_text

PRIMARY_KEY_INDEX = "_id_"

# Index options carried over from the source definition
INDEX_OPTIONS = ("unique", "sparse")


class CollectionExporter:
    """Export and restore the collections of one database.

    Each collection is written to ``<collection>.json`` holding its documents,
    index definitions, statistics and the identity of its source.
    """

    def __init__(self, database: BaseDatabaseHandle, cluster: str, database_name: str):
        """Initialize exporter.

        Args:
            database: Database handle to read from or write to
            cluster: Cluster name, echoed into export files
            database_name: Database name, echoed into export files
        """
        self.database = database
        self.cluster = cluster
        self.database_name = database_name

    async def export(self, name: str, output_dir: Path) -> CollectionRecord:
        """Export one collection.

        Errors are confined to the collection: they produce a
        ``CollectionFailure`` instead of propagating.

        Args:
            name: Collection name
            output_dir: Backup directory

        Returns:
            Success or failure record for the manifest
        """
        file_name = f"{name}{COLLECTION_SUFFIX}"
        if file_name == MANIFEST_FILENAME:
            logger.error(f"Cannot backup collection {name}: export file would replace the manifest")
            return CollectionFailure(
                name=name,
                error=f"export file {file_name} collides with the backup manifest",
            )

        try:
            collection = self.database.collection(name)
            documents = await collection.find()
            indexes = await collection.list_indexes()
            stats = await self._read_stats(collection)

            payload = dumps_extended({
                "collection": name,
                "database": self.database_name,
                "cluster": self.cluster,
                "documents": documents,
                "indexes": indexes,
                "stats": stats,
            })
            await write_text(output_dir / file_name, payload)
        except Exception as e:
            logger.error(f"Failed to backup collection {name}: {e}")
            return CollectionFailure(name=name, error=str(e))

        logger.info(f"Backed up collection: {name} ({len(documents)} documents)")
        return CollectionSuccess(
            name=name,
            document_count=len(documents),
            size_bytes=len(payload.encode("utf-8")),
            index_count=len(indexes),
        )

    async def _read_stats(self, collection: BaseCollectionHandle) -> Dict[str, Any]:
        try:
            return await collection.stats()
        except Exception as e:
            logger.debug(f"Stats unavailable for {collection.name}: {e}")
            return {}

    async def restore(self, name: str, input_dir: Path, drop_existing: bool = False) -> RestoredCollection:
        """Restore one collection from its export file.

        Args:
            name: Collection name
            input_dir: Directory containing the export files
            drop_existing: Drop the target collection first

        Returns:
            Restored collection summary
        """
        file_name = f"{name}{COLLECTION_SUFFIX}"
        if file_name == MANIFEST_FILENAME:
            raise ValueError(f"Collection {name} has no export file of its own")

        data = loads_extended(await read_text(input_dir / file_name))
        documents = data.get("documents", [])
        indexes = data.get("indexes", [])

        collection = self.database.collection(name)

        if drop_existing:
            try:
                await collection.drop()
            except Exception as e:
                # Collection might not exist
                logger.debug(f"Drop of {name} skipped: {e}")

        if documents:
            await collection.insert_many(documents, ordered=False)

        secondary = [ix for ix in indexes if ix.get("name") != PRIMARY_KEY_INDEX]
        await self._restore_indexes(collection, secondary)

        logger.info(f"Restored collection: {name}")
        return RestoredCollection(
            name=name,
            document_count=len(documents),
            index_count=len(secondary),
        )

    async def _restore_indexes(self, collection: BaseCollectionHandle, indexes: List[Dict[str, Any]]) -> None:
        for index in indexes:
            options = {"name": index.get("name")}
            options.update({k: index[k] for k in INDEX_OPTIONS if k in index})
            try:
                await collection.create_index(index["key"], **options)
            except Exception as e:
                logger.warning(f"Failed to restore index {index.get('name')}: {e}")
