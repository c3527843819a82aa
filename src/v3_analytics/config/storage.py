"""
Where entities are persisted, and whether pools are backfilled over RPC.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError

SUPPORTED_BACKENDS = ("memory", "json", "redis")


@dataclass
class StorageConfig(BaseConfig):
    """Entity store backend selection plus the knobs each backend reads."""

    STORAGE_BACKEND: str = BaseConfig.get_env("STORAGE_BACKEND", "memory")

    # json backend
    SNAPSHOT_FILENAME: str = BaseConfig.get_env("SNAPSHOT_FILENAME", "entities.json")
    SNAPSHOT_COMPRESS: bool = BaseConfig.get_env_bool("SNAPSHOT_COMPRESS", False)

    # redis backend
    REDIS_HOST: str = BaseConfig.get_env("REDIS_HOST", "localhost")
    REDIS_PORT: int = BaseConfig.get_env_int("REDIS_PORT", 6379)
    REDIS_PASSWORD: Optional[str] = BaseConfig.get_env("REDIS_PASSWORD") or None
    REDIS_DB: int = BaseConfig.get_env_int("REDIS_DB", 0)
    REDIS_KEY_PREFIX: str = BaseConfig.get_env("REDIS_KEY_PREFIX", "v3analytics")
    CONNECTION_TIMEOUT: int = BaseConfig.get_env_int("CONNECTION_TIMEOUT", 30)

    ENABLE_FEE_GROWTH_BACKFILL: bool = BaseConfig.get_env_bool("ENABLE_FEE_GROWTH_BACKFILL", False)

    def __post_init__(self):
        super().__post_init__()
        if self.STORAGE_BACKEND not in SUPPORTED_BACKENDS:
            raise ConfigError(
                f"Unknown storage backend {self.STORAGE_BACKEND!r}, "
                f"choose from {', '.join(SUPPORTED_BACKENDS)}"
            )

    def get_json_storage_config(self) -> Dict[str, Any]:
        return {
            "base_path": str(self.DATA_DIR),
            "filename": self.SNAPSHOT_FILENAME,
            "compress": self.SNAPSHOT_COMPRESS,
        }

    def get_redis_connection_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``redis.ConnectionPool``; a blank password is left out."""
        kwargs = dict(
            host=self.REDIS_HOST,
            port=self.REDIS_PORT,
            db=self.REDIS_DB,
            decode_responses=True,
            socket_timeout=self.CONNECTION_TIMEOUT,
            socket_connect_timeout=self.CONNECTION_TIMEOUT,
        )
        password = (self.REDIS_PASSWORD or "").strip()
        if password:
            kwargs["password"] = password
        return kwargs
