"""Example of snapshotting, restoring and scheduling MongoDB backups."""

import asyncio
import os

from mongo_lifecycle import BackupConfig, BackupManager
from mongo_lifecycle._storage import JsonConfigStore, MongoClusterRegistry
from mongo_lifecycle.backup.models import BackupOptions


async def main():
    config = BackupConfig(backup_dir="./example_backups", retention_days=14)

    registry = MongoClusterRegistry()
    registry.add_cluster("local", os.getenv("MONGODB_URI", "mongodb://localhost:27017"))

    config_store = JsonConfigStore("./example_backups/config.json")
    manager = BackupManager(registry, config_store, config=config)
    await manager.initialize()

    try:
        print("=== Creating Backup ===")
        result = await manager.create_backup("local", "shop", compress=True)
        print(f"Backup {result.name}: {result.collection_count} collections, "
              f"{result.manifest.total_documents} documents")
        for failed in result.manifest.failed_collections:
            print(f"  failed: {failed.name} ({failed.error})")

        print("\n=== Restoring Into a Copy ===")
        restore = await manager.restore_backup(result.name, "local", "shop_copy", drop_existing=True)
        for collection in restore.restored_collections:
            print(f"  {collection.name}: {collection.document_count} documents")

        print("\n=== Available Backups ===")
        for backup in await manager.list_backups():
            print(f"  {backup.name} ({backup.size_bytes} bytes, compressed={backup.compressed})")

        print("\n=== Scheduling Nightly Backup ===")
        await manager.schedule_backup("local", "shop", "0 3 * * *", BackupOptions(compress=True))
        for schedule in manager.list_scheduled_backups():
            print(f"  {schedule.id}: {schedule.trigger_pattern}, next run {schedule.next_run}")

        removed = await manager.cleanup_old_backups()
        print(f"\nRemoved {removed} expired backups")
    finally:
        await manager.shutdown()
        await registry.close()


if __name__ == "__main__":
    asyncio.run(main())
