"""
Single entry point for engine settings.

ConfigManager bundles the base, chain and storage sections so the orchestrator
and the storage factory receive one object. Module-level get_config() keeps a
process-wide instance.
"""

import logging
from typing import Dict, Any, Optional

from .base import BaseConfig, ConfigError
from .chains import ChainConfig, ChainSettings
from .storage import StorageConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Holds every config section and checks that enabled chains can be priced."""

    def __init__(self, environment: Optional[str] = None):
        """
        Args:
            environment: Overrides ENVIRONMENT from the process environment
        """
        try:
            self.base = BaseConfig() if environment is None else BaseConfig(ENVIRONMENT=environment)
            self.chains = ChainConfig()
            self.storage = StorageConfig()
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Could not build configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}") from e

        logger.info(f"Loaded configuration for {self.environment} ({len(self.chains.enabled_chains)} chains)")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    def get_chain_settings(self, chain_id: int) -> ChainSettings:
        return self.chains.get_chain_settings(chain_id)

    def validate_configuration(self) -> bool:
        """
        Check that every enabled chain has what pricing needs.

        A chain must name its factory, its stablecoin/wrapped-native reference
        pool and its wrapped native token, and the wrapped native token must be
        whitelisted. A missing RPC URL is only logged since token metadata can
        still come from static overrides.

        Returns:
            True when every enabled chain passes

        Raises:
            ConfigError: Describing the first problem found
        """
        enabled = self.chains.enabled_chains
        if not enabled:
            raise ConfigError("No chains enabled")

        for chain_id, settings in enabled.items():
            required = {
                "factory address": settings.factory_address,
                "reference pool": settings.stablecoin_wrapped_native_pool_address,
                "wrapped native token": settings.wrapped_native_address,
            }
            missing = [label for label, value in required.items() if not value]
            if missing:
                raise ConfigError(f"Chain {chain_id} is missing: {', '.join(missing)}")
            if settings.wrapped_native_address not in settings.whitelist_tokens:
                raise ConfigError(f"Chain {chain_id} does not whitelist its wrapped native token")
            if not settings.rpc_url:
                logger.warning(f"Chain {chain_id} has no RPC URL; token metadata limited to overrides")

        logger.info(f"Validated {len(enabled)} chain configurations")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "base": self.base.to_dict(),
            "chains": self.chains.to_dict(),
            "storage": self.storage.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Return the shared ConfigManager, building and validating it on first use."""
    global _config_manager

    if _config_manager is None or force_reload:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    return get_config(environment=environment, force_reload=True)
