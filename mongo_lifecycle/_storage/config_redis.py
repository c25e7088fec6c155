"""Redis-backed configuration store for shared deployments."""

import json
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.retry import Retry

from ..base import BaseConfigStore
from .._utils import logger


class RedisConfigStore(BaseConfigStore):
    """Settings held in memory and persisted to one Redis hash.

    Each setting is a hash field holding its JSON-encoded value. Call
    ``load`` once before use.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        redis_password: Optional[str] = None,
        key: str = "mongo_lifecycle:settings",
        client: Optional[Any] = None,
    ):
        self.redis_url = redis_url
        self.redis_password = redis_password
        self.key = key
        self._redis_client = client
        self._settings: Dict[str, Any] = {}

    async def _ensure_initialized(self):
        """Ensure Redis connection is initialized."""
        if self._redis_client is not None:
            return

        retry = Retry(
            ExponentialBackoff(cap=10, base=1),
            retries=3,
            supported_errors=(RedisConnectionError, TimeoutError, ConnectionError)
        )
        self._redis_client = aioredis.from_url(
            self.redis_url,
            password=self.redis_password,
            decode_responses=True,
            retry=retry,
        )

        try:
            await self._redis_client.ping()
            logger.info(f"Connected to Redis settings store: {self.key}")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}")
            raise

    async def load(self) -> None:
        await self._ensure_initialized()

        raw = await self._redis_client.hgetall(self.key)
        settings = {}
        for field, value in raw.items():
            try:
                settings[field] = json.loads(value)
            except json.JSONDecodeError as e:
                logger.error(f"Ignoring undecodable setting {field}: {e}")
        self._settings = settings

    def get_setting(self, key: str) -> Any:
        return self._settings.get(key)

    def set_setting(self, key: str, value: Any) -> None:
        self._settings[key] = value

    async def save(self) -> None:
        await self._ensure_initialized()

        # Replace the whole hash atomically so removed settings disappear
        async with self._redis_client.pipeline(transaction=True) as pipe:
            pipe.delete(self.key)
            if self._settings:
                pipe.hset(
                    self.key,
                    mapping={k: json.dumps(v, default=str) for k, v in self._settings.items()},
                )
            await pipe.execute()

        logger.debug(f"Settings saved to Redis: {self.key}")

    async def close(self) -> None:
        if self._redis_client is not None:
            await self._redis_client.aclose()
            self._redis_client = None
