"""
Locked-value bookkeeping shared by the pool event processors.

The factory's native TVL is the running sum of its pools' native TVL. It is
maintained by subtracting a pool's old value before the pool changes and
adding the new value afterwards, never by summing all pools.
"""

from .entity_types import Bundle, Factory, Pool, Token


def remove_pool_tvl_from_factory(factory: Factory, pool: Pool) -> None:
    factory.total_value_locked_eth -= pool.total_value_locked_eth


def recompute_pool_tvl(pool: Pool, token0: Token, token1: Token, bundle: Bundle) -> None:
    """Recompute a pool's native and USD TVL from its token balances."""
    pool.total_value_locked_eth = (
        pool.total_value_locked_token0 * token0.derived_eth
        + pool.total_value_locked_token1 * token1.derived_eth
    )
    pool.total_value_locked_usd = pool.total_value_locked_eth * bundle.eth_price_usd


def add_pool_tvl_to_factory(factory: Factory, pool: Pool, bundle: Bundle) -> None:
    factory.total_value_locked_eth += pool.total_value_locked_eth
    factory.total_value_locked_usd = factory.total_value_locked_eth * bundle.eth_price_usd


def refresh_token_tvl_usd(token: Token, bundle: Bundle) -> None:
    token.total_value_locked_usd = token.total_value_locked * token.derived_eth * bundle.eth_price_usd
