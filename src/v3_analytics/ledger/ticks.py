"""
Tick liquidity ledger.

Tick records are created lazily by the first Mint that references them and
are never deleted; their liquidity counters may return to zero.
"""

from decimal import Decimal
from typing import Tuple

from v3_analytics.pricing.v3_math import ONE_BD, fast_exponentiation, safe_div
from .entity_types import Tick

_PRICE1_QUANTUM = Decimal("1e-18")


def price_at_tick(tick_idx: int) -> Tuple[Decimal, Decimal]:
    """
    Prices at a tick in both orderings.

    price0 = 1.0001^tick is computed over floats; price1 = 1 / price0.
    """
    price0 = Decimal(str(fast_exponentiation(1.0001, tick_idx)))
    price1 = safe_div(ONE_BD, price0)
    if price1:
        price1 = price1.quantize(_PRICE1_QUANTUM)
    return price0, price1


def create_tick(
    tick_id: str,
    tick_idx: int,
    pool_id: str,
    pool_address: str,
    timestamp: int,
    block_number: int,
    chain_id: int,
) -> Tick:
    price0, price1 = price_at_tick(tick_idx)
    return Tick(
        id=tick_id,
        chain_id=chain_id,
        pool_id=pool_id,
        pool_address=pool_address,
        tick_idx=tick_idx,
        created_at_timestamp=timestamp,
        created_at_block_number=block_number,
        liquidity_gross=0,
        liquidity_net=0,
        price0=price0,
        price1=price1,
    )


def apply_mint(lower_tick: Tick, upper_tick: Tick, amount: int) -> None:
    """Add a position's liquidity to its boundary ticks."""
    lower_tick.liquidity_gross += amount
    lower_tick.liquidity_net += amount
    upper_tick.liquidity_gross += amount
    upper_tick.liquidity_net -= amount


def apply_burn(lower_tick: Tick, upper_tick: Tick, amount: int) -> None:
    """Remove a position's liquidity from its boundary ticks."""
    lower_tick.liquidity_gross -= amount
    lower_tick.liquidity_net -= amount
    upper_tick.liquidity_gross -= amount
    upper_tick.liquidity_net += amount


def is_active_range(tick_lower: int, tick_upper: int, current_tick) -> bool:
    """True when the pool's current tick lies in [tick_lower, tick_upper)."""
    return current_tick is not None and tick_lower <= current_tick < tick_upper
