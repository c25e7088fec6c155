"""Pydantic models for API requests."""

from typing import Optional

from pydantic import BaseModel, Field

from mongo_lifecycle.backup.models import BackupOptions


class CreateBackupRequest(BaseModel):
    cluster: str = Field(..., min_length=1)
    database: str = Field(..., min_length=1)
    compress: Optional[bool] = None


class RestoreBackupRequest(BaseModel):
    source_path: str = Field(..., min_length=1, description="Backup path or name")
    target_cluster: str = Field(..., min_length=1)
    target_database: str = Field(..., min_length=1)
    drop_existing: bool = False


class ScheduleBackupRequest(BaseModel):
    cluster: str = Field(..., min_length=1)
    database: str = Field(..., min_length=1)
    pattern: str = Field(..., min_length=1, description="Cron expression (5 or 6 fields)")
    options: BackupOptions = Field(default_factory=BackupOptions)


class ScheduleResponse(BaseModel):
    id: str


class CleanupRequest(BaseModel):
    retention_days: Optional[int] = Field(default=None, gt=0)


class CleanupResponse(BaseModel):
    removed: int
