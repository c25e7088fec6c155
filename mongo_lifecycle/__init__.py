from .backup import BackupManager, BackupScheduler
from .config import BackupConfig

__version__ = "0.3.0"
__author__ = "mongo-lifecycle contributors"
__url__ = "https://github.com/mongo-lifecycle/mongo-lifecycle"

__all__ = ["BackupManager", "BackupScheduler", "BackupConfig"]
