"""Configuration management for mongo-lifecycle."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_CONFIG_PATH = str(Path.home() / ".mongo-lifecycle" / "config.json")


@dataclass(frozen=True)
class BackupConfig:
    """Backup engine configuration."""
    backup_dir: str = "./backups"
    retention_days: int = 30
    compress: bool = False

    # Keys inside the configuration store
    schedules_key: str = "backupSchedules"
    retention_key: str = "backupRetention"

    # Timezone cron triggers are evaluated in
    timezone: str = "UTC"

    # Configuration store backend
    config_backend: str = "json"  # json, redis
    config_path: str = DEFAULT_CONFIG_PATH
    redis_url: str = "redis://localhost:6379"
    redis_password: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls(
            backup_dir=os.getenv("BACKUP_DIR", "./backups"),
            retention_days=int(os.getenv("BACKUP_RETENTION_DAYS", "30")),
            compress=os.getenv("BACKUP_COMPRESS", "false").lower() == "true",
            schedules_key=os.getenv("BACKUP_SCHEDULES_KEY", "backupSchedules"),
            timezone=os.getenv("BACKUP_TIMEZONE", "UTC"),
            config_backend=os.getenv("CONFIG_BACKEND", "json"),
            config_path=os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_password=os.getenv("REDIS_PASSWORD"),
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.retention_days <= 0:
            raise ValueError(f"retention_days must be positive, got {self.retention_days}")
        if self.config_backend not in ("json", "redis"):
            raise ValueError(f"Unknown config backend: {self.config_backend}")
        if not self.schedules_key:
            raise ValueError("schedules_key must not be empty")
