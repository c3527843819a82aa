"""
In-memory entity store.
"""

import copy
import logging
from typing import Any, Dict, Iterator, Optional, Tuple

from .base import StorageBase, EntityStoreInterface

logger = logging.getLogger(__name__)


class InMemoryEntityStore(StorageBase, EntityStoreInterface):
    """
    Entity store backed by a dict keyed on (kind, id).

    Entities are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self._entities: Dict[Tuple[str, str], Any] = {}

    async def connect(self) -> None:
        self.is_connected = True

    async def disconnect(self) -> None:
        self.is_connected = False

    async def health_check(self) -> bool:
        return True

    async def get(self, kind: str, entity_id: str) -> Optional[Any]:
        entity = self._entities.get((kind, entity_id))
        return copy.deepcopy(entity) if entity is not None else None

    async def set(self, entity: Any) -> None:
        self._entities[(entity.KIND, entity.id)] = copy.deepcopy(entity)

    def count(self, kind: Optional[str] = None) -> int:
        """Number of stored entities, optionally of one kind."""
        if kind is None:
            return len(self._entities)
        return sum(1 for stored_kind, _ in self._entities if stored_kind == kind)

    def iter_entities(self, kind: Optional[str] = None) -> Iterator[Any]:
        """Iterate detached copies of stored entities."""
        for (stored_kind, _), entity in list(self._entities.items()):
            if kind is None or stored_kind == kind:
                yield copy.deepcopy(entity)
