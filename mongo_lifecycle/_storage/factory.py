"""Factory for the configuration store selected by BackupConfig."""

from ..base import BaseConfigStore
from ..config import BackupConfig
from .config_json import JsonConfigStore
from .config_redis import RedisConfigStore


async def create_config_store(config: BackupConfig) -> BaseConfigStore:
    """Create and load the configuration store.

    Args:
        config: Backup configuration naming the backend

    Returns:
        Loaded configuration store
    """
    if config.config_backend == "redis":
        store = RedisConfigStore(config.redis_url, config.redis_password)
        await store.load()
        return store
    return JsonConfigStore(config.config_path)
