"""
Environment-backed settings shared by every config section.

Values come from the process environment, optionally seeded from a local
.env file. Typed getters live on BaseConfig so section dataclasses can use
them as field defaults.
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, fields
from dotenv import load_dotenv

load_dotenv()

VALID_ENVIRONMENTS = ("local", "dev", "staging", "production")
TRUTHY = ("true", "1", "yes", "on")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(Exception):
    """Raised when a setting is missing or cannot be parsed."""


@dataclass
class BaseConfig:
    """Process-wide settings: where snapshots go, which environment, how loud."""

    PROJECT_ROOT: Path = Path(__file__).resolve().parents[3]
    DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        if self.ENVIRONMENT not in VALID_ENVIRONMENTS:
            raise ConfigError(f"Invalid environment: {self.ENVIRONMENT}")

        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(level=level, format=LOG_FORMAT)

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read a raw string from the environment.

        Args:
            key: Variable name
            default: Returned when the variable is unset
            required: Raise instead of returning None

        Raises:
            ConfigError: If ``required`` and nothing is set
        """
        value = os.environ.get(key, default)
        if value is None and required:
            raise ConfigError(f"Missing required environment variable {key!r}")
        return value

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        raw = os.environ.get(key)
        if raw is None:
            if default is None and required:
                raise ConfigError(f"Missing required environment variable {key!r}")
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key} is not an integer: {raw!r}")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        raw = os.environ.get(key)
        if raw is None:
            if default is None and required:
                raise ConfigError(f"Missing required environment variable {key!r}")
            return default
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"{key} is not a number: {raw!r}")

    @staticmethod
    def get_env_bool(key: str, default: bool = False) -> bool:
        raw = os.environ.get(key)
        if raw is None:
            return default
        return raw.strip().lower() in TRUTHY

    @staticmethod
    def get_env_list(key: str, default: Optional[List[str]] = None, separator: str = ",") -> List[str]:
        """Split a delimited variable, dropping empty items."""
        raw = os.environ.get(key)
        if raw is None:
            return list(default or [])
        return [part.strip() for part in raw.split(separator) if part.strip()]

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
