"""Tests for BackupInventory."""

import asyncio
import os
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from mongo_lifecycle.backup.inventory import BackupInventory
from mongo_lifecycle.backup.models import BackupManifest, CollectionFailure, CollectionSuccess
from mongo_lifecycle.backup.utils import save_manifest


async def write_backup_dir(root, name, created_at, files=None):
    path = root / name
    path.mkdir()
    for file_name, content in (files or {}).items():
        (path / file_name).write_text(content)

    manifest = BackupManifest(cluster="prod", database="shop", created_at=created_at)
    manifest.add_collection(CollectionSuccess(name="users", document_count=2, size_bytes=10, index_count=1))
    manifest.add_collection(CollectionFailure(name="broken", error="boom"))
    await save_manifest(manifest, path / "backup-info.json")
    return path


@pytest.mark.asyncio
async def test_list_backups_empty(temp_backup_dir):
    assert await BackupInventory(temp_backup_dir).list_backups() == []


@pytest.mark.asyncio
async def test_list_backups_missing_root(temp_backup_dir):
    assert await BackupInventory(temp_backup_dir / "nope").list_backups() == []


@pytest.mark.asyncio
async def test_directory_backup_described_from_manifest(temp_backup_dir):
    created_at = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
    path = await write_backup_dir(temp_backup_dir, "prod-shop-a", created_at, {"users.json": "x" * 100})

    backups = await BackupInventory(temp_backup_dir).list_backups()

    assert len(backups) == 1
    backup = backups[0]
    assert backup.name == "prod-shop-a"
    assert backup.path == str(path)
    assert backup.created_at == created_at
    assert backup.cluster == "prod"
    assert backup.database == "shop"
    assert backup.collection_count == 2
    assert backup.total_documents == 2
    assert backup.compressed is False
    assert backup.size_bytes == sum(f.stat().st_size for f in path.iterdir())


@pytest.mark.asyncio
async def test_archive_described_from_file(temp_backup_dir):
    archive = temp_backup_dir / "prod-shop-b.zip"
    archive.write_bytes(b"0123456789")
    mtime = datetime(2026, 9, 1, tzinfo=timezone.utc).timestamp()
    os.utime(archive, (mtime, mtime))

    backups = await BackupInventory(temp_backup_dir).list_backups()

    assert len(backups) == 1
    backup = backups[0]
    assert backup.name == "prod-shop-b"
    assert backup.compressed is True
    assert backup.size_bytes == 10
    assert backup.created_at == datetime(2026, 9, 1, tzinfo=timezone.utc)
    assert backup.cluster is None


@pytest.mark.asyncio
async def test_unrecognised_entries_are_skipped(temp_backup_dir):
    """Directories without a readable manifest, stray files and dot entries are ignored."""
    await write_backup_dir(temp_backup_dir, "prod-shop-ok", datetime.now(timezone.utc))

    (temp_backup_dir / "no-manifest").mkdir()
    corrupt = temp_backup_dir / "corrupt"
    corrupt.mkdir()
    (corrupt / "backup-info.json").write_text("{broken")
    (temp_backup_dir / "notes.txt").write_text("hello")
    await write_backup_dir(temp_backup_dir, ".restore-123", datetime.now(timezone.utc))

    backups = await BackupInventory(temp_backup_dir).list_backups()

    assert [b.name for b in backups] == ["prod-shop-ok"]


@pytest.mark.asyncio
async def test_list_backups_sorted_newest_first(temp_backup_dir):
    now = datetime.now(timezone.utc)
    await write_backup_dir(temp_backup_dir, "middle", now - timedelta(days=2))
    await write_backup_dir(temp_backup_dir, "newest", now)
    await write_backup_dir(temp_backup_dir, "oldest", now - timedelta(days=9))

    archive = temp_backup_dir / "older.zip"
    archive.write_bytes(b"zip")
    mtime = (now - timedelta(days=5)).timestamp()
    os.utime(archive, (mtime, mtime))

    backups = await BackupInventory(temp_backup_dir).list_backups()

    assert [b.name for b in backups] == ["newest", "middle", "older", "oldest"]


@pytest.mark.asyncio
async def test_filesystem_walks_run_in_threads(temp_backup_dir):
    await write_backup_dir(temp_backup_dir, "prod-shop-a", datetime.now(timezone.utc))
    (temp_backup_dir / "prod-shop-b.zip").write_bytes(b"zip")

    real_to_thread = asyncio.to_thread
    offloaded = []

    async def recording_to_thread(func, *args, **kwargs):
        offloaded.append(getattr(func, "__name__", repr(func)))
        return await real_to_thread(func, *args, **kwargs)

    with patch("mongo_lifecycle.backup.inventory.asyncio.to_thread", new=recording_to_thread):
        backups = await BackupInventory(temp_backup_dir).list_backups()

    assert len(backups) == 2
    assert "_scan" in offloaded
    assert "_directory_size" in offloaded
    assert "stat" in offloaded
