"""Backup and restore orchestration for document-database clusters."""

import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator, List, Optional, Union

from .._utils import logger, utc_now
from ..base import BaseClusterRegistry, BaseConfigStore
from ..config import BackupConfig
from .exceptions import BackupNotFoundError
from .exporters import CollectionExporter
from .inventory import BackupInventory
from .models import (
    BackupDescriptor,
    BackupManifest,
    BackupOptions,
    BackupResult,
    CollectionFailure,
    RestoreResult,
    RestoreTarget,
    ScheduledBackup,
)
from .scheduler import BackupScheduler
from .utils import (
    ARCHIVE_SUFFIX,
    MANIFEST_FILENAME,
    create_archive,
    extract_archive,
    generate_backup_name,
    is_archive,
    load_manifest,
    remove_path,
    save_manifest,
)


class BackupManager:
    """Orchestrate snapshot, restore, scheduling and retention for databases."""

    def __init__(
        self,
        registry: BaseClusterRegistry,
        config_store: BaseConfigStore,
        backup_dir: Optional[str] = None,
        config: Optional[BackupConfig] = None,
    ):
        """Initialize backup manager.

        Args:
            registry: Resolves cluster/database names to handles
            config_store: Settings store holding schedules and retention
            backup_dir: Directory for backups, overrides ``config.backup_dir``
            config: Backup configuration
        """
        self.registry = registry
        self.config_store = config_store
        self.config = config or BackupConfig()
        self.backup_dir = Path(backup_dir or self.config.backup_dir)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self.inventory = BackupInventory(self.backup_dir)
        self.scheduler = BackupScheduler(
            self.create_backup,
            config_store,
            schedules_key=self.config.schedules_key,
            timezone=self.config.timezone,
        )

    async def initialize(self) -> None:
        """Prepare the backup root, start the scheduler and replay persisted schedules."""
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            self.scheduler.start()
            loaded = await self.scheduler.load_persisted()
            logger.info(f"Backup manager initialized ({loaded} scheduled backups)")
        except Exception as e:
            logger.error(f"Failed to initialize backup manager: {e}")
            raise

    async def shutdown(self) -> None:
        self.scheduler.shutdown()

    async def create_backup(self, cluster: str, database: str, compress: Optional[bool] = None) -> BackupResult:
        """Snapshot every collection of a database.

        A collection that cannot be exported is recorded as a failure in the
        manifest and does not abort the backup.

        Args:
            cluster: Source cluster name
            database: Source database name
            compress: Replace the backup directory with a zip archive;
                defaults to ``config.compress``

        Returns:
            BackupResult; ``size_bytes`` is the uncompressed payload size
        """
        if compress is None:
            compress = self.config.compress

        try:
            db = self.registry.get_database(cluster, database)

            created_at = utc_now()
            name = generate_backup_name(cluster, database, created_at)
            backup_path = self.backup_dir / name
            backup_path.mkdir(parents=True, exist_ok=True)

            logger.info(f"Starting backup for {cluster}/{database}")

            # Collections created after this point are not part of the backup
            collection_names = await db.list_collections()

            manifest = BackupManifest(cluster=cluster, database=database, created_at=created_at)
            exporter = CollectionExporter(db, cluster, database)
            for collection_name in collection_names:
                record = await exporter.export(collection_name, backup_path)
                manifest.add_collection(record)

            await save_manifest(manifest, backup_path / MANIFEST_FILENAME)

            result_path = backup_path
            if compress:
                archive_path = self.backup_dir / f"{name}{ARCHIVE_SUFFIX}"
                await create_archive(backup_path, archive_path)
                await remove_path(backup_path)

                manifest.compressed = True
                manifest.archive_path = str(archive_path)
                result_path = archive_path

            if manifest.failed_collections:
                logger.warning(
                    f"Backup {name} completed with {len(manifest.failed_collections)} failed collections"
                )
            logger.info(f"Backup completed: {name}")

            return BackupResult(
                name=name,
                path=str(result_path),
                manifest=manifest,
                size_bytes=manifest.total_size,
                collection_count=len(manifest.collections),
            )

        except Exception as e:
            logger.error(f"Backup failed for {cluster}/{database}: {e}")
            raise

    async def restore_backup(
        self,
        source_path: Union[str, Path],
        target_cluster: str,
        target_database: str,
        drop_existing: bool = False,
        within_backup_dir: bool = False,
    ) -> RestoreResult:
        """Restore a backup into a target database.

        Collections that failed to snapshot are skipped. Per-collection restore
        problems are logged and the collection is left out of the result.

        Args:
            source_path: Backup directory, archive, or backup name under the backup root
            target_cluster: Target cluster name
            target_database: Target database name
            drop_existing: Drop each target collection before inserting
            within_backup_dir: Only accept sources located under the backup root

        Returns:
            RestoreResult

        Raises:
            BackupNotFoundError: If the source cannot be resolved
        """
        source = self._resolve_source(source_path, within_backup_dir)

        try:
            async with self._expanded(source) as backup_dir:
                manifest = await load_manifest(backup_dir / MANIFEST_FILENAME)
                db = self.registry.get_database(target_cluster, target_database)
                exporter = CollectionExporter(db, target_cluster, target_database)

                logger.info(f"Starting restore to {target_cluster}/{target_database}")

                restored = []
                for record in manifest.collections:
                    if isinstance(record, CollectionFailure):
                        logger.info(f"Skipping collection {record.name}: failed during backup")
                        continue

                    try:
                        restored.append(await exporter.restore(record.name, backup_dir, drop_existing))
                    except Exception as e:
                        logger.error(f"Failed to restore collection {record.name}: {e}")

            logger.info("Restore completed")

            return RestoreResult(
                restored_collections=restored,
                source_manifest=manifest,
                target=RestoreTarget(cluster=target_cluster, database=target_database),
            )

        except Exception as e:
            logger.error(f"Restore failed: {e}")
            raise

    async def list_backups(self) -> List[BackupDescriptor]:
        """List all available backups, newest first."""
        return await self.inventory.list_backups()

    async def delete_backup(self, name: str) -> bool:
        """Delete a backup archive or directory.

        Returns:
            True if deleted, False if not found
        """
        path = await self.get_backup_path(name)
        if path is None:
            return False

        await remove_path(path)
        logger.info(f"Deleted backup: {name}")
        return True

    async def get_backup_path(self, name: str) -> Optional[Path]:
        """Get path to a backup by name, preferring the archive."""
        for candidate in (self.backup_dir / f"{name}{ARCHIVE_SUFFIX}", self.backup_dir / name):
            if candidate.exists() and not candidate.name.startswith("."):
                return candidate
        return None

    async def cleanup_old_backups(self, retention_days: Optional[int] = None) -> int:
        """Delete backups older than the retention period.

        Args:
            retention_days: Age threshold; defaults to the stored
                ``backupRetention`` setting, then the configured default

        Returns:
            Number of backups removed
        """
        if retention_days is None:
            retention_days = self._stored_retention_days()
        cutoff = utc_now() - timedelta(days=retention_days)

        removed = 0
        for backup in await self.inventory.list_backups():
            if backup.created_at >= cutoff:
                continue
            try:
                await remove_path(Path(backup.path))
                removed += 1
                logger.info(f"Cleaned up old backup: {backup.name}")
            except Exception as e:
                logger.error(f"Failed to cleanup backup {backup.name}: {e}")

        return removed

    async def schedule_backup(
        self,
        cluster: str,
        database: str,
        trigger_pattern: str,
        options: Optional[BackupOptions] = None,
    ) -> str:
        return await self.scheduler.schedule_backup(cluster, database, trigger_pattern, options)

    async def unschedule_backup(self, schedule_id: str) -> bool:
        return await self.scheduler.unschedule_backup(schedule_id)

    def list_scheduled_backups(self) -> List[ScheduledBackup]:
        return self.scheduler.list_scheduled_backups()

    # Private helper methods

    def _stored_retention_days(self) -> int:
        stored = self.config_store.get_setting(self.config.retention_key)
        if stored is None:
            return self.config.retention_days

        try:
            days = int(stored)
        except (TypeError, ValueError):
            days = 0
        if days <= 0:
            logger.warning(
                f"Ignoring invalid {self.config.retention_key} setting {stored!r}, "
                f"using {self.config.retention_days} days"
            )
            return self.config.retention_days
        return days

    def _resolve_source(self, source_path: Union[str, Path], within_backup_dir: bool = False) -> Path:
        source = Path(source_path)
        if not within_backup_dir and source.exists():
            return source

        root = self.backup_dir.resolve()
        for candidate in (self.backup_dir / f"{source}{ARCHIVE_SUFFIX}", self.backup_dir / source):
            # Absolute or '..' sources can point outside the backup root
            if within_backup_dir:
                resolved = candidate.resolve()
                if resolved == root or not resolved.is_relative_to(root):
                    continue
            if candidate.exists():
                return candidate

        raise BackupNotFoundError(str(source_path))

    @asynccontextmanager
    async def _expanded(self, source: Path) -> AsyncIterator[Path]:
        """Yield a directory holding the backup files, extracting archives to scratch space."""
        if not is_archive(source):
            yield source
            return

        scratch_dir = self.backup_dir / f".restore-{uuid.uuid4().hex}"
        try:
            await extract_archive(source, scratch_dir)
            yield scratch_dir
        finally:
            if scratch_dir.exists():
                await remove_path(scratch_dir)
