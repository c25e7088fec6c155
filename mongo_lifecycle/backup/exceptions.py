"""Exceptions raised by backup/restore operations."""


class BackupError(Exception):
    """Base exception for backup engine errors."""
    pass


class ManifestError(BackupError):
    """Manifest missing, unreadable or invalid."""
    pass


class ArchiveError(BackupError):
    """Archive could not be written or read."""
    pass


class BackupNotFoundError(BackupError):
    def __init__(self, name: str):
        super().__init__(f"Backup not found: {name}")
        self.name = name


class InvalidTriggerPatternError(BackupError):
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid trigger pattern '{pattern}': {reason}")
        self.pattern = pattern
