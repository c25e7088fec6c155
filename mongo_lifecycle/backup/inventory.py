"""Enumerate backups stored under the backup root."""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional, Tuple

from .._utils import logger
from .exceptions import ManifestError
from .models import BackupDescriptor
from .utils import ARCHIVE_SUFFIX, MANIFEST_FILENAME, load_manifest


def _scan(backup_dir: Path) -> List[Tuple[Path, bool]]:
    """Visible entries of the backup root with their is-directory flag."""
    if not backup_dir.exists():
        return []
    with os.scandir(backup_dir) as entries:
        return [
            (Path(entry.path), entry.is_dir())
            for entry in entries
            if not entry.name.startswith(".")
        ]


def _directory_size(path: Path) -> int:
    return sum(f.stat().st_size for f in path.rglob("*") if f.is_file())


class BackupInventory:
    """Describe on-disk backups from directory entries and their manifests.

    Nothing is cached; every call rescans the backup root. Filesystem
    walks run in worker threads.
    """

    def __init__(self, backup_dir: Path):
        self.backup_dir = Path(backup_dir)

    async def iter_backups(self) -> AsyncIterator[BackupDescriptor]:
        """Yield a descriptor for every recognised entry, in directory order."""
        for path, is_dir in await asyncio.to_thread(_scan, self.backup_dir):
            if is_dir:
                descriptor = await self._describe_directory(path)
            elif path.name.endswith(ARCHIVE_SUFFIX):
                descriptor = await self._describe_archive(path)
            else:
                descriptor = None

            if descriptor is not None:
                yield descriptor

    async def list_backups(self) -> List[BackupDescriptor]:
        """List all backups, newest first."""
        backups = [backup async for backup in self.iter_backups()]
        backups.sort(key=lambda b: b.created_at, reverse=True)
        return backups

    async def _describe_directory(self, path: Path) -> Optional[BackupDescriptor]:
        try:
            manifest = await load_manifest(path / MANIFEST_FILENAME)
        except ManifestError as e:
            logger.debug(f"Skipping {path.name}: {e}")
            return None

        size = await asyncio.to_thread(_directory_size, path)
        return BackupDescriptor(
            name=path.name,
            path=str(path),
            created_at=manifest.created_at,
            cluster=manifest.cluster,
            database=manifest.database,
            collection_count=len(manifest.collections),
            total_documents=manifest.total_documents,
            size_bytes=size,
            compressed=False,
        )

    async def _describe_archive(self, path: Path) -> BackupDescriptor:
        stat = await asyncio.to_thread(path.stat)
        return BackupDescriptor(
            name=path.name[: -len(ARCHIVE_SUFFIX)],
            path=str(path),
            created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            size_bytes=stat.st_size,
            compressed=True,
        )
