"""
Redis-backed entity store.

Every entity is one string key holding its JSON document, so a pool and its
tokens can be inspected with plain redis-cli GETs.
"""

import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
import ujson

from v3_analytics.ledger.entity_types import entity_from_dict, entity_to_dict
from .base import StorageBase, EntityStoreInterface, ConnectionError, DataError

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "v3analytics"
POOL_OPTIONS = ("host", "port", "db", "password", "socket_timeout", "socket_connect_timeout")


class RedisEntityStore(StorageBase, EntityStoreInterface):
    """
    Entity store writing ``{key_prefix}:{kind}:{entity_id}`` keys.

    The config dict accepts the ConnectionPool options in POOL_OPTIONS plus
    ``key_prefix``; StorageConfig.get_redis_connection_kwargs() produces a
    compatible dict.
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.client: Optional[Redis] = None
        self.key_prefix = config.get("key_prefix", DEFAULT_KEY_PREFIX)

    async def connect(self) -> None:
        options = {k: self.config[k] for k in POOL_OPTIONS if self.config.get(k) is not None}
        options.setdefault("host", "localhost")
        options.setdefault("port", 6379)

        try:
            pool = redis.ConnectionPool(decode_responses=True, **options)
            self.client = redis.Redis(connection_pool=pool)
            await self.client.ping()
        except Exception as e:
            logger.error(f"Redis at {options['host']}:{options['port']} unreachable: {e}")
            raise ConnectionError(f"Redis connection failed: {e}") from e

        self.is_connected = True
        logger.info(f"Connected to Redis, keys prefixed {self.key_prefix!r}")

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None
        self.is_connected = False

    async def health_check(self) -> bool:
        if self.client is None:
            return False
        try:
            return await self.client.ping() is True
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    def _key(self, kind: str, entity_id: str) -> str:
        return f"{self.key_prefix}:{kind}:{entity_id}"

    def _require_client(self) -> Redis:
        if self.client is None:
            raise ConnectionError("Redis entity store used before connect()")
        return self.client

    async def get(self, kind: str, entity_id: str) -> Optional[Any]:
        client = self._require_client()
        try:
            raw = await client.get(self._key(kind, entity_id))
            return None if raw is None else entity_from_dict(ujson.loads(raw), kind)
        except Exception as e:
            logger.error(f"Could not read {kind} {entity_id}: {e}")
            raise DataError(f"Entity get failed: {e}") from e

    async def set(self, entity: Any) -> None:
        client = self._require_client()
        try:
            await client.set(self._key(entity.KIND, entity.id), ujson.dumps(entity_to_dict(entity)))
        except Exception as e:
            logger.error(f"Could not write {entity.KIND} {entity.id}: {e}")
            raise DataError(f"Entity set failed: {e}") from e
