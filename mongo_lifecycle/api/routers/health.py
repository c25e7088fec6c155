"""Health check endpoints."""

from fastapi import APIRouter, Depends
from typing import Dict

from ..dependencies import get_backup_manager
from mongo_lifecycle import __version__
from mongo_lifecycle.backup import BackupManager

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(backup_manager: BackupManager = Depends(get_backup_manager)) -> Dict:
    """Report scheduler state and the backup root."""
    return {
        "status": "healthy" if backup_manager.scheduler.running else "degraded",
        "version": __version__,
        "backup_dir": str(backup_manager.backup_dir),
        "scheduled_backups": len(backup_manager.list_scheduled_backups()),
    }
