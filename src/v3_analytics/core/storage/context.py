"""
Per-event unit of work over an entity store.
"""

import logging
from typing import Any, Dict, Optional, Tuple, Type

from .base import EntityStoreInterface, StorageError

logger = logging.getLogger(__name__)


class EntityContext:
    """
    Read-through cache and write buffer for the processing of one event.

    get() returns the same object for repeated reads of a key, so processors
    mutate aggregates in place. set() stages an entity; nothing reaches the
    store until commit(). rollback() discards staged writes and the cache, so
    a failing event leaves no partial state behind.

    Example:
        async with EntityContext(store) as context:
            pool = await context.get(Pool, pool_id)
            pool.tx_count += 1
            context.set(pool)
        # committed on normal exit, rolled back on exception
    """

    def __init__(self, store: EntityStoreInterface):
        self.store = store
        self._cache: Dict[Tuple[str, str], Optional[Any]] = {}
        self._pending: Dict[Tuple[str, str], Any] = {}
        self._closed = False

    async def get(self, entity_type: Type, entity_id: str) -> Optional[Any]:
        """
        Load an entity by type and id, serving staged writes first.

        Args:
            entity_type: Entity dataclass (e.g. Pool)
            entity_id: Chain-scoped entity id

        Returns:
            The entity, or None if it does not exist
        """
        self._check_open()
        key = (entity_type.KIND, entity_id)
        if key in self._pending:
            return self._pending[key]
        if key not in self._cache:
            self._cache[key] = await self.store.get(entity_type.KIND, entity_id)
        return self._cache[key]

    def set(self, entity: Any) -> None:
        """Stage an entity for commit."""
        self._check_open()
        key = (entity.KIND, entity.id)
        self._pending[key] = entity
        self._cache[key] = entity

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def commit(self) -> int:
        """
        Flush staged entities to the store.

        Returns:
            Number of entities written
        """
        self._check_open()
        written = 0
        for entity in self._pending.values():
            await self.store.set(entity)
            written += 1
        self._close()
        return written

    def rollback(self) -> None:
        """Discard staged entities."""
        if self._pending:
            logger.debug(f"Discarding {len(self._pending)} staged entities")
        self._close()

    def _close(self) -> None:
        self._pending.clear()
        self._cache.clear()
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("Entity context already committed or rolled back")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._closed:
            return
        if exc_type is None:
            await self.commit()
        else:
            self.rollback()
