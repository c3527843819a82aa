"""
Entity store layer for the v3 analytics engine.

Backends:
- InMemoryEntityStore: process-local dict, used by tests and replays
- JsonEntityStore: in-memory store with a durable JSON snapshot
- RedisEntityStore: one JSON document per entity in Redis

EntityContext wraps any backend as the unit of work for one event.
"""

from .base import (
    StorageBase,
    EntityStoreInterface,
    StorageError,
    ConnectionError,
    DataError,
)
from .context import EntityContext
from .json_storage import JsonEntityStore
from .memory import InMemoryEntityStore
from .redis import RedisEntityStore


def create_entity_store(storage_config) -> StorageBase:
    """
    Build the backend selected by StorageConfig.STORAGE_BACKEND.

    Args:
        storage_config: StorageConfig instance

    Returns:
        An unconnected store; use it as an async context manager
    """
    backend = storage_config.STORAGE_BACKEND
    if backend == "json":
        return JsonEntityStore(storage_config.get_json_storage_config())
    if backend == "redis":
        config = storage_config.get_redis_connection_kwargs()
        config["key_prefix"] = storage_config.REDIS_KEY_PREFIX
        return RedisEntityStore(config)
    if backend == "memory":
        return InMemoryEntityStore()
    raise StorageError(f"Unknown storage backend: {backend}")


__all__ = [
    "StorageBase",
    "EntityStoreInterface",
    "StorageError",
    "ConnectionError",
    "DataError",
    "EntityContext",
    "InMemoryEntityStore",
    "JsonEntityStore",
    "RedisEntityStore",
    "create_entity_store",
]
