"""Concrete collaborators: cluster registry and configuration stores."""

from .cluster_mongo import ClusterNotFoundError, MongoClusterRegistry
from .config_json import JsonConfigStore
from .config_redis import RedisConfigStore
from .factory import create_config_store

__all__ = [
    "ClusterNotFoundError",
    "MongoClusterRegistry",
    "JsonConfigStore",
    "RedisConfigStore",
    "create_config_store",
]
