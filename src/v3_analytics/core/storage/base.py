"""
Storage contracts shared by the entity store backends.

StorageBase covers connection lifecycle; EntityStoreInterface is the keyed
entity access the processors depend on. A backend usually implements both.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class StorageError(Exception):
    """Root of every storage failure."""


class ConnectionError(StorageError):
    """The backend could not be reached or was used before connect()."""


class DataError(StorageError):
    """A read or write failed, or stored data could not be decoded."""


class StorageBase(ABC):
    """Connection lifecycle for a backend; usable as an async context manager."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.is_connected = False

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the backend answers, never raising."""

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


class EntityStoreInterface(ABC):
    """
    Keyed get/set of ledger entities.

    Implementations must be read-after-write consistent and must hand out
    detached objects: mutating a returned entity never changes the stored
    copy until it is passed back to set().
    """

    @abstractmethod
    async def get(self, kind: str, entity_id: str) -> Optional[Any]:
        """
        Load an entity.

        Args:
            kind: Entity kind (e.g. "Pool")
            entity_id: Chain-scoped entity id

        Returns:
            The entity, or None if absent
        """

    @abstractmethod
    async def set(self, entity: Any) -> None:
        """Insert or overwrite an entity keyed by its KIND and id."""
