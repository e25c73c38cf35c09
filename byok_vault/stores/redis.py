"""
RedisStore — document backend for :class:`KeyStore`.

Each record is one orjson document stored under
``"{prefix}:{user_id}:{provider}"``. The redis client is injected
(any async client exposing ``set``/``get``/``delete``/``exists``, such as
``redis.asyncio.Redis``); this module does not open connections.

Security Note:
    Documents hold ciphertext only. Never log document bodies.
"""
import logging
from typing import Any, Optional

from ..models import KeyRecord, Provider

logger = logging.getLogger("byok.store")


class RedisStore:
    """Key store persisting records as JSON documents in Redis."""

    def __init__(self, redis: Any, prefix: str = "byok"):
        if redis is None:
            raise ValueError("RedisStore requires a redis client")
        self._redis = redis
        self._prefix = prefix

    def _redis_key(self, user_id: str, provider: Provider) -> str:
        """Build Redis document key."""
        return f"{self._prefix}:{user_id}:{Provider(provider).value}"

    async def set(self, record: KeyRecord) -> None:
        await self._redis.set(
            self._redis_key(record.user_id, record.provider),
            record.to_json(),
        )
        logger.debug(
            "Redis store set: user=%s provider=%s",
            record.user_id, record.provider,
        )

    async def get(self, user_id: str, provider: Provider) -> Optional[KeyRecord]:
        raw = await self._redis.get(self._redis_key(user_id, provider))
        if raw is None:
            return None
        return KeyRecord.from_json(raw)

    async def delete(self, user_id: str, provider: Provider) -> bool:
        removed = await self._redis.delete(self._redis_key(user_id, provider))
        return bool(removed)

    async def has(self, user_id: str, provider: Provider) -> bool:
        found = await self._redis.exists(self._redis_key(user_id, provider))
        return bool(found)
