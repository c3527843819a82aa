"""
Configuration management for the v3 analytics engine.

Use get_config() once at startup and pass the resulting settings into the
components that need them.

Example:
    from v3_analytics.config import get_config

    config = get_config()

    # Per-chain pricing settings
    mainnet = config.get_chain_settings(1)
    reference_pool = mainnet.stablecoin_wrapped_native_pool_address

    # Entity store settings
    redis_kwargs = config.storage.get_redis_connection_kwargs()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig, ChainSettings
from .manager import ConfigManager, get_config, reload_config
from .static_tokens import StaticTokenDefinition, get_static_definition
from .storage import StorageConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ChainSettings",
    "StorageConfig",
    "StaticTokenDefinition",
    "get_static_definition",
    "ConfigManager",
    "get_config",
    "reload_config",
]
