"""Tests for backup data models."""

import json
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from mongo_lifecycle.backup.models import (
    BackupManifest,
    CollectionFailure,
    CollectionSuccess,
    ScheduleEntry,
)


def make_manifest(**overrides) -> BackupManifest:
    data = {
        "cluster": "prod",
        "database": "shop",
        "created_at": datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return BackupManifest(**data)


def test_add_collection_recomputes_totals():
    """Totals only count successful collections."""
    manifest = make_manifest()

    manifest.add_collection(CollectionSuccess(name="users", document_count=2, size_bytes=100, index_count=2))
    manifest.add_collection(CollectionFailure(name="broken", error="boom"))
    manifest.add_collection(CollectionSuccess(name="orders", document_count=3, size_bytes=50, index_count=1))

    assert [c.name for c in manifest.collections] == ["users", "broken", "orders"]
    assert manifest.total_documents == 5
    assert manifest.total_size == 150
    assert [f.name for f in manifest.failed_collections] == ["broken"]


def test_manifest_json_uses_camel_case():
    manifest = make_manifest()
    manifest.add_collection(CollectionSuccess(name="users", document_count=2, size_bytes=100, index_count=2))
    manifest.add_collection(CollectionFailure(name="broken", error="boom"))

    data = json.loads(manifest.model_dump_json(by_alias=True))

    assert data["createdAt"].startswith("2026-10-01T12:00:00")
    assert data["totalDocuments"] == 2
    assert data["totalSize"] == 100
    assert data["compressed"] is False
    assert data["archivePath"] is None
    assert data["collections"][0] == {"name": "users", "documentCount": 2, "sizeBytes": 100, "indexCount": 2}
    assert data["collections"][1] == {"name": "broken", "error": "boom"}


def test_manifest_parses_record_variants():
    """Records are parsed into the variant their keys match."""
    manifest = BackupManifest.model_validate({
        "cluster": "prod",
        "database": "shop",
        "createdAt": "2026-10-01T12:00:00Z",
        "collections": [
            {"name": "users", "documentCount": 2, "sizeBytes": 100, "indexCount": 2},
            {"name": "broken", "error": "boom"},
        ],
        "totalDocuments": 2,
        "totalSize": 100,
    })

    assert isinstance(manifest.collections[0], CollectionSuccess)
    assert isinstance(manifest.collections[1], CollectionFailure)
    assert manifest.collections[1].error == "boom"


def test_record_cannot_carry_data_and_error():
    with pytest.raises(ValidationError):
        BackupManifest.model_validate({
            "cluster": "prod",
            "database": "shop",
            "createdAt": "2026-10-01T12:00:00Z",
            "collections": [
                {"name": "users", "documentCount": 2, "sizeBytes": 100, "indexCount": 2, "error": "boom"},
            ],
        })


def test_naive_created_at_is_treated_as_utc():
    manifest = make_manifest(created_at=datetime(2026, 10, 1, 12, 0))
    assert manifest.created_at.tzinfo is not None
    assert manifest.created_at == datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def test_schedule_entry_accepts_legacy_pattern_key():
    entry = ScheduleEntry.model_validate({
        "id": "prod-shop",
        "cluster": "prod",
        "database": "shop",
        "pattern": "0 3 * * *",
        "options": {"compress": True},
        "createdAt": "2026-10-01T12:00:00Z",
    })

    assert entry.trigger_pattern == "0 3 * * *"
    assert entry.options.compress is True

    persisted = entry.to_persisted()
    assert persisted["triggerPattern"] == "0 3 * * *"
    assert persisted["options"] == {"compress": True}
    assert "pattern" not in persisted


def test_schedule_entry_id():
    assert ScheduleEntry.make_id("prod", "shop") == "prod-shop"
