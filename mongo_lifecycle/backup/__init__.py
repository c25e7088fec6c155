"""Backup, restore, scheduling and retention for document databases."""

from .manager import BackupManager
from .scheduler import BackupScheduler
from .inventory import BackupInventory
from .exceptions import (
    BackupError,
    ManifestError,
    ArchiveError,
    BackupNotFoundError,
    InvalidTriggerPatternError,
)

__all__ = [
    "BackupManager",
    "BackupScheduler",
    "BackupInventory",
    "BackupError",
    "ManifestError",
    "ArchiveError",
    "BackupNotFoundError",
    "InvalidTriggerPatternError",
]
