"""Data models for backup/restore operations.

Serialized forms use the camelCase keys of the on-disk manifest
(``backup-info.json``); Python attributes are snake_case.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .._utils import ensure_utc


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CollectionSuccess(_CamelModel):
    """A collection that was exported."""

    model_config = ConfigDict(extra="forbid")

    name: str
    document_count: int
    size_bytes: int
    index_count: int


class CollectionFailure(_CamelModel):
    """A collection that could not be exported; carries the error instead of data."""

    model_config = ConfigDict(extra="forbid")

    name: str
    error: str


# Both variants forbid extra keys, so a record carrying data and an error validates as neither.
CollectionRecord = Union[CollectionSuccess, CollectionFailure]


class BackupManifest(_CamelModel):
    """Backup manifest with per-collection outcome and totals."""

    cluster: str = Field(..., description="Source cluster name")
    database: str = Field(..., description="Source database name")
    created_at: datetime = Field(..., description="Backup creation timestamp")
    collections: List[CollectionRecord] = Field(default_factory=list)
    total_documents: int = 0
    total_size: int = 0
    compressed: bool = False
    archive_path: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def add_collection(self, record: CollectionRecord) -> None:
        """Append a record and recompute the derived totals."""
        self.collections.append(record)
        self.total_documents = sum(
            r.document_count for r in self.collections if isinstance(r, CollectionSuccess)
        )
        self.total_size = sum(
            r.size_bytes for r in self.collections if isinstance(r, CollectionSuccess)
        )

    @property
    def failed_collections(self) -> List[CollectionFailure]:
        return [r for r in self.collections if isinstance(r, CollectionFailure)]


class BackupResult(_CamelModel):
    """Result of a snapshot. ``size_bytes`` is the logical (pre-compression) size."""

    name: str
    path: str
    manifest: BackupManifest
    size_bytes: int
    collection_count: int


class RestoredCollection(_CamelModel):
    name: str
    document_count: int
    index_count: int


class RestoreTarget(_CamelModel):
    cluster: str
    database: str


class RestoreResult(_CamelModel):
    restored_collections: List[RestoredCollection] = Field(default_factory=list)
    source_manifest: BackupManifest
    target: RestoreTarget


class BackupDescriptor(_CamelModel):
    """Inventory view of a backup, derived from the filesystem and its manifest."""

    name: str
    path: str
    created_at: datetime
    cluster: Optional[str] = None
    database: Optional[str] = None
    collection_count: int = 0
    total_documents: int = 0
    size_bytes: int = 0
    compressed: bool = False


class BackupOptions(_CamelModel):
    model_config = ConfigDict(extra="ignore")

    compress: bool = False


class ScheduleEntry(_CamelModel):
    """A recurring backup of one (cluster, database) pair."""

    id: str
    cluster: str
    database: str
    trigger_pattern: str = Field(
        ...,
        validation_alias=AliasChoices("triggerPattern", "trigger_pattern", "pattern"),
        serialization_alias="triggerPattern",
    )
    options: BackupOptions = Field(default_factory=BackupOptions)
    created_at: datetime

    @staticmethod
    def make_id(cluster: str, database: str) -> str:
        return f"{cluster}-{database}"

    def to_persisted(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ScheduledBackup(ScheduleEntry):
    """Schedule entry as reported to callers, with its next firing time."""

    next_run: Optional[datetime] = None
