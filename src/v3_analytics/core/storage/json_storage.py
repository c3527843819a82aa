"""
Entity store that keeps everything in memory and snapshots it to one JSON file.

Useful for local runs and replays: the snapshot is read on connect() and
written back on disconnect(), so ``async with JsonEntityStore(...)`` resumes
where the previous run stopped.
"""

import gzip
import logging
from pathlib import Path
from typing import Any, Dict, IO, Optional

import ujson

from v3_analytics.ledger.entity_types import entity_from_dict, entity_to_dict
from .base import DataError
from .memory import InMemoryEntityStore

logger = logging.getLogger(__name__)


class JsonEntityStore(InMemoryEntityStore):
    """
    Snapshot-persisted variant of InMemoryEntityStore.

    Config keys: ``base_path`` (default ./data), ``filename`` (default
    entities.json) and ``compress``, which gzips the file and appends .gz to
    the name.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.base_path = Path(self.config.get("base_path", "./data"))
        self.compress = bool(self.config.get("compress", False))

        filename = self.config.get("filename", "entities.json")
        if self.compress and not filename.endswith(".gz"):
            filename += ".gz"
        self.filepath = self.base_path / filename

    async def connect(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        count = self.load()
        self.is_connected = True
        logger.info(f"Opened snapshot {self.filepath} with {count} entities")

    async def disconnect(self) -> None:
        if self.is_connected:
            self.save()
        self.is_connected = False

    async def health_check(self) -> bool:
        return self.base_path.is_dir()

    def _open(self, path: Path, mode: str) -> IO[str]:
        if self.compress:
            return gzip.open(path, mode + "t", encoding="utf-8")
        return open(path, mode, encoding="utf-8")

    def save(self) -> int:
        """
        Write all entities, replacing the snapshot only once the new file is complete.

        Returns:
            Number of entities written

        Raises:
            DataError: If the file cannot be written
        """
        records = [entity_to_dict(entity) for entity in self._entities.values()]
        partial = self.filepath.with_suffix(".tmp")
        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            with self._open(partial, "w") as f:
                ujson.dump(records, f)
            partial.replace(self.filepath)
        except Exception as e:
            logger.error(f"Snapshot write to {self.filepath} failed: {e}")
            raise DataError(f"JSON save failed: {e}") from e

        logger.debug(f"Wrote {len(records)} entities to {self.filepath}")
        return len(records)

    def load(self) -> int:
        """Replace in-memory state with the snapshot; 0 when there is none yet."""
        if not self.filepath.exists():
            return 0

        try:
            with self._open(self.filepath, "r") as f:
                records = ujson.load(f)
            entities = [entity_from_dict(record) for record in records]
        except Exception as e:
            logger.error(f"Snapshot {self.filepath} is unreadable: {e}")
            raise DataError(f"JSON load failed: {e}") from e

        self._entities = {(entity.KIND, entity.id): entity for entity in entities}
        return len(entities)
