"""
Time-bucketed rollups.

Each update function takes the current aggregate plus the existing bucket (or
None) and returns the bucket after observing the aggregate: a new bucket is
seeded with open = high = low = close = current price, every observation
widens high/low, moves close, overwrites stock fields and counts one
transaction. Flow fields (volume, fees) are added by the record_* helpers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from v3_analytics.utils.ids import bucket_id, protocol_day_id
from .entity_types import (
    Bundle,
    Factory,
    Pool,
    PoolDayData,
    PoolHourData,
    Token,
    TokenDayData,
    TokenHourData,
    UniswapDayData,
)

DAY_SECONDS = 86400
HOUR_SECONDS = 3600


def get_day_id(timestamp: int) -> int:
    return timestamp // DAY_SECONDS


def get_day_start_timestamp(day_id: int) -> int:
    return day_id * DAY_SECONDS


def get_hour_index(timestamp: int) -> int:
    return timestamp // HOUR_SECONDS


def get_hour_start_unix(hour_index: int) -> int:
    return hour_index * HOUR_SECONDS


def uniswap_day_data_id(day_id: int, chain_id: int) -> str:
    return protocol_day_id(day_id, chain_id)


def pool_bucket_id(pool: Pool, bucket_index: int) -> str:
    return bucket_id(pool.address, bucket_index, pool.chain_id)


def token_bucket_id(token: Token, bucket_index: int) -> str:
    return bucket_id(token.address, bucket_index, token.chain_id)


def _observe_price(bucket, price: Decimal) -> None:
    if price > bucket.high:
        bucket.high = price
    if price < bucket.low:
        bucket.low = price
    bucket.close = price


def update_uniswap_day_data(
    day_id: int, factory: Factory, day_data: Optional[UniswapDayData]
) -> UniswapDayData:
    """Protocol-wide day bucket; mirrors the factory's TVL and tx count."""
    if day_data is None:
        day_data = UniswapDayData(
            id=uniswap_day_data_id(day_id, factory.chain_id),
            chain_id=factory.chain_id,
            date=get_day_start_timestamp(day_id),
        )
    day_data.tvl_usd = factory.total_value_locked_usd
    day_data.tx_count = factory.tx_count
    return day_data


def _update_pool_bucket(bucket, pool: Pool, fee_growth0: Optional[int], fee_growth1: Optional[int]):
    _observe_price(bucket, pool.token0_price)
    if fee_growth0 is not None:
        bucket.fee_growth_global0_x128 = fee_growth0
    if fee_growth1 is not None:
        bucket.fee_growth_global1_x128 = fee_growth1
    bucket.liquidity = pool.liquidity
    bucket.sqrt_price = pool.sqrt_price
    bucket.token0_price = pool.token0_price
    bucket.token1_price = pool.token1_price
    bucket.tick = pool.tick
    bucket.tvl_usd = pool.total_value_locked_usd
    bucket.tx_count += 1
    return bucket


def update_pool_day_data(
    day_id: int,
    pool: Pool,
    day_data: Optional[PoolDayData],
    fee_growth0: Optional[int] = None,
    fee_growth1: Optional[int] = None,
) -> PoolDayData:
    if day_data is None:
        price = pool.token0_price
        day_data = PoolDayData(
            id=pool_bucket_id(pool, day_id),
            chain_id=pool.chain_id,
            date=get_day_start_timestamp(day_id),
            pool_id=pool.id,
            open_price=price,
            high=price,
            low=price,
            close=price,
        )
    return _update_pool_bucket(day_data, pool, fee_growth0, fee_growth1)


def update_pool_hour_data(
    timestamp: int,
    pool: Pool,
    hour_data: Optional[PoolHourData],
    fee_growth0: Optional[int] = None,
    fee_growth1: Optional[int] = None,
) -> PoolHourData:
    if hour_data is None:
        hour_index = get_hour_index(timestamp)
        price = pool.token0_price
        hour_data = PoolHourData(
            id=pool_bucket_id(pool, hour_index),
            chain_id=pool.chain_id,
            period_start_unix=get_hour_start_unix(hour_index),
            pool_id=pool.id,
            open_price=price,
            high=price,
            low=price,
            close=price,
        )
    return _update_pool_bucket(hour_data, pool, fee_growth0, fee_growth1)


def _update_token_bucket(bucket, token: Token, price: Decimal):
    _observe_price(bucket, price)
    bucket.price_usd = price
    bucket.total_value_locked = token.total_value_locked
    bucket.total_value_locked_usd = token.total_value_locked_usd
    bucket.tx_count += 1
    return bucket


def update_token_day_data(
    token: Token, bundle: Bundle, day_id: int, day_data: Optional[TokenDayData]
) -> TokenDayData:
    price = token.derived_eth * bundle.eth_price_usd
    if day_data is None:
        day_data = TokenDayData(
            id=token_bucket_id(token, day_id),
            chain_id=token.chain_id,
            date=get_day_start_timestamp(day_id),
            token_id=token.id,
            open_price=price,
            high=price,
            low=price,
            close=price,
        )
    return _update_token_bucket(day_data, token, price)


def update_token_hour_data(
    token: Token, bundle: Bundle, timestamp: int, hour_data: Optional[TokenHourData]
) -> TokenHourData:
    price = token.derived_eth * bundle.eth_price_usd
    if hour_data is None:
        hour_index = get_hour_index(timestamp)
        hour_data = TokenHourData(
            id=token_bucket_id(token, hour_index),
            chain_id=token.chain_id,
            period_start_unix=get_hour_start_unix(hour_index),
            token_id=token.id,
            open_price=price,
            high=price,
            low=price,
            close=price,
        )
    return _update_token_bucket(hour_data, token, price)


def record_pool_volume(
    bucket, amount0: Decimal, amount1: Decimal, volume_usd: Decimal, fees_usd: Decimal
) -> None:
    """Add one swap's flows to a pool day/hour bucket."""
    bucket.volume_token0 += amount0
    bucket.volume_token1 += amount1
    bucket.volume_usd += volume_usd
    bucket.fees_usd += fees_usd


def record_token_volume(
    bucket, amount: Decimal, volume_usd: Decimal, untracked_usd: Decimal, fees_usd: Decimal
) -> None:
    """Add one swap's flows to a token day/hour bucket."""
    bucket.volume += amount
    bucket.volume_usd += volume_usd
    bucket.untracked_volume_usd += untracked_usd
    bucket.fees_usd += fees_usd


def record_protocol_volume(
    day_data: UniswapDayData,
    volume_eth: Decimal,
    volume_usd: Decimal,
    untracked_usd: Decimal,
    fees_usd: Decimal,
) -> None:
    day_data.volume_eth += volume_eth
    day_data.volume_usd += volume_usd
    day_data.volume_usd_untracked += untracked_usd
    day_data.fees_usd += fees_usd


@dataclass
class IntervalSnapshot:
    """The seven buckets touched by one pool event."""
    uniswap_day: UniswapDayData
    pool_day: PoolDayData
    pool_hour: PoolHourData
    token0_day: TokenDayData
    token1_day: TokenDayData
    token0_hour: TokenHourData
    token1_hour: TokenHourData

    def all(self) -> List:
        return [
            self.uniswap_day, self.pool_day, self.pool_hour,
            self.token0_day, self.token1_day, self.token0_hour, self.token1_hour,
        ]


async def load_pool_hour_data(context, pool: Pool, timestamp: int) -> Optional[PoolHourData]:
    return await context.get(PoolHourData, pool_bucket_id(pool, get_hour_index(timestamp)))


async def update_pool_intervals(
    context,
    pool: Pool,
    timestamp: int,
    fee_growth0: Optional[int] = None,
    fee_growth1: Optional[int] = None,
):
    """Feed the pool's day and hour buckets and stage them on the context."""
    day_id = get_day_id(timestamp)
    pool_day = update_pool_day_data(
        day_id, pool, await context.get(PoolDayData, pool_bucket_id(pool, day_id)),
        fee_growth0, fee_growth1,
    )
    pool_hour = update_pool_hour_data(
        timestamp, pool, await load_pool_hour_data(context, pool, timestamp),
        fee_growth0, fee_growth1,
    )
    context.set(pool_day)
    context.set(pool_hour)
    return pool_day, pool_hour


async def update_all_intervals(
    context,
    factory: Factory,
    pool: Pool,
    token0: Token,
    token1: Token,
    bundle: Bundle,
    timestamp: int,
    fee_growth0: Optional[int] = None,
    fee_growth1: Optional[int] = None,
) -> IntervalSnapshot:
    """
    Feed the protocol, pool and both token buckets for one event.

    Buckets are staged on the context and returned so the caller can add
    the event's flows.
    """
    day_id = get_day_id(timestamp)
    hour_index = get_hour_index(timestamp)

    uniswap_day = update_uniswap_day_data(
        day_id, factory,
        await context.get(UniswapDayData, uniswap_day_data_id(day_id, factory.chain_id)),
    )
    pool_day, pool_hour = await update_pool_intervals(context, pool, timestamp, fee_growth0, fee_growth1)
    token0_day = update_token_day_data(
        token0, bundle, day_id, await context.get(TokenDayData, token_bucket_id(token0, day_id))
    )
    token1_day = update_token_day_data(
        token1, bundle, day_id, await context.get(TokenDayData, token_bucket_id(token1, day_id))
    )
    token0_hour = update_token_hour_data(
        token0, bundle, timestamp, await context.get(TokenHourData, token_bucket_id(token0, hour_index))
    )
    token1_hour = update_token_hour_data(
        token1, bundle, timestamp, await context.get(TokenHourData, token_bucket_id(token1, hour_index))
    )

    snapshot = IntervalSnapshot(
        uniswap_day, pool_day, pool_hour, token0_day, token1_day, token0_hour, token1_hour
    )
    for bucket in snapshot.all():
        context.set(bucket)
    return snapshot
