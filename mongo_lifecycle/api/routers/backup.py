"""Backup and restore API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..dependencies import get_backup_manager
from ..exceptions import CLIENT_ERRORS, to_http_error
from ..models import (
    CleanupRequest,
    CleanupResponse,
    CreateBackupRequest,
    RestoreBackupRequest,
    ScheduleBackupRequest,
    ScheduleResponse,
)
from mongo_lifecycle.backup import BackupManager
from mongo_lifecycle.backup.models import BackupDescriptor, BackupResult, RestoreResult, ScheduledBackup
from mongo_lifecycle.backup.utils import is_archive
from mongo_lifecycle._utils import logger

router = APIRouter(prefix="/backups", tags=["backup"])


@router.get("", response_model=List[BackupDescriptor])
async def list_backups(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> List[BackupDescriptor]:
    """List all available backups, newest first."""
    return await backup_manager.list_backups()


@router.post("", response_model=BackupResult)
async def create_backup(
    request: CreateBackupRequest,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> BackupResult:
    """Snapshot a database."""
    try:
        return await backup_manager.create_backup(
            request.cluster, request.database, compress=request.compress
        )
    except CLIENT_ERRORS as e:
        raise to_http_error(e) from e


@router.post("/restore", response_model=RestoreResult)
async def restore_backup(
    request: RestoreBackupRequest,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> RestoreResult:
    """Restore a backup into a target database."""
    try:
        return await backup_manager.restore_backup(
            request.source_path,
            request.target_cluster,
            request.target_database,
            drop_existing=request.drop_existing,
            within_backup_dir=True,
        )
    except CLIENT_ERRORS as e:
        raise to_http_error(e) from e


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_backups(
    request: Optional[CleanupRequest] = None,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> CleanupResponse:
    """Delete backups older than the retention period."""
    retention_days = request.retention_days if request else None
    removed = await backup_manager.cleanup_old_backups(retention_days)
    return CleanupResponse(removed=removed)


@router.get("/schedules", response_model=List[ScheduledBackup])
async def list_schedules(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> List[ScheduledBackup]:
    """List scheduled backups."""
    return backup_manager.list_scheduled_backups()


@router.post("/schedules", response_model=ScheduleResponse)
async def schedule_backup(
    request: ScheduleBackupRequest,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> ScheduleResponse:
    """Create or replace the recurring backup of a database."""
    try:
        schedule_id = await backup_manager.schedule_backup(
            request.cluster, request.database, request.pattern, request.options
        )
    except CLIENT_ERRORS as e:
        raise to_http_error(e) from e
    return ScheduleResponse(id=schedule_id)


@router.delete("/schedules/{schedule_id}")
async def unschedule_backup(
    schedule_id: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> dict:
    """Cancel a scheduled backup."""
    removed = await backup_manager.unschedule_backup(schedule_id)

    if not removed:
        raise HTTPException(status_code=404, detail=f"Schedule not found: {schedule_id}")

    return {"message": f"Unscheduled backup: {schedule_id}"}


@router.get("/{name}/download")
async def download_backup(
    name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> FileResponse:
    """Download a compressed backup as a .zip file."""
    backup_path = await backup_manager.get_backup_path(name)

    if not backup_path or not is_archive(backup_path):
        raise HTTPException(status_code=404, detail=f"Backup archive not found: {name}")

    logger.info(f"Serving backup archive: {backup_path}")
    return FileResponse(
        path=backup_path,
        media_type="application/zip",
        filename=backup_path.name,
    )


@router.delete("/{name}")
async def delete_backup(
    name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> dict:
    """Delete a backup archive or directory."""
    deleted = await backup_manager.delete_backup(name)

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Backup not found: {name}")

    return {"message": f"Backup deleted: {name}"}
