"""
Price-moving event processors: Initialize and Swap.

Both events move a pool's price, so both refresh the native USD price from
the reference pool and reprice the pool's tokens through the oracle.
"""

from decimal import Decimal

from v3_analytics.core.storage.context import EntityContext
from v3_analytics.ledger.entity_types import Swap
from v3_analytics.ledger.intervals import (
    record_pool_volume,
    record_protocol_volume,
    record_token_volume,
    update_all_intervals,
    update_pool_intervals,
)
from v3_analytics.ledger.state import (
    add_pool_tvl_to_factory,
    recompute_pool_tvl,
    refresh_token_tvl_usd,
    remove_pool_tvl_from_factory,
)
from v3_analytics.ledger.transactions import load_transaction
from v3_analytics.pricing.oracle import get_tracked_amount_usd
from v3_analytics.pricing.v3_math import (
    convert_token_to_decimal,
    safe_div,
    sqrt_price_x96_to_token_prices,
)
from v3_analytics.utils.ids import event_record_id
from .base import BaseEventProcessor, ProcessorResult
from .events import InitializeEvent, SwapEvent

# Pools with known bad pricing; swaps on them are ignored
SWAP_POOLS_TO_SKIP = ["0x9663f2ca0454accad3e094448ea6f77443880454-1"]

FEE_TIER_DENOMINATOR = Decimal("1000000")
TWO_BD = Decimal("2")


class InitializeProcessor(BaseEventProcessor):
    """
    Sets a pool's first price.

    The pool's token prices are left for the first Swap to fill in; only the
    sqrt price and tick are taken from the event.
    """

    EVENT_NAME = InitializeEvent.NAME

    async def process(self, event: InitializeEvent, context: EntityContext) -> ProcessorResult:
        pool = await self._load_pool(context, event)
        if pool is None:
            return self._missing(f"pool {event.src_address}", event)
        bundle = await self._load_bundle(context)
        if bundle is None:
            return self._missing(f"bundle {self.runtime.bundle_id}", event)

        pool.sqrt_price = event.sqrt_price_x96
        pool.tick = event.tick
        context.set(pool)

        bundle.eth_price_usd = await self._native_price_in_usd(context)
        context.set(bundle)

        fee_growth0, fee_growth1 = await self._backfill_fee_growth(context, pool, event)
        await update_pool_intervals(context, pool, event.block_timestamp, fee_growth0, fee_growth1)

        token0, token1 = await self._load_tokens(context, pool)
        if token0 is not None and token1 is not None:
            await self._refresh_derived_prices(token0, token1, bundle, context)
            context.set(token0)
            context.set(token1)

        return ProcessorResult(success=True)


class SwapProcessor(BaseEventProcessor):
    """Books a swap's volume and fees and reprices the pool and its tokens."""

    EVENT_NAME = SwapEvent.NAME

    async def process(self, event: SwapEvent, context: EntityContext) -> ProcessorResult:
        bundle = await self._load_bundle(context)
        if bundle is None:
            return self._missing(f"bundle {self.runtime.bundle_id}", event)
        factory = await self._load_factory(context)
        if factory is None:
            return self._missing(f"factory {self.runtime.factory_id}", event)
        pool = await self._load_pool(context, event)
        if pool is None:
            return self._missing(f"pool {event.src_address}", event)

        if pool.id in SWAP_POOLS_TO_SKIP:
            return self._skipped(f"pool {pool.id} has known bad pricing", event)

        token0, token1 = await self._load_tokens(context, pool)
        if token0 is None or token1 is None:
            return self._skipped(f"tokens of pool {pool.id} not indexed", event)

        # signed deltas from the pool's perspective
        amount0 = convert_token_to_decimal(event.amount0, token0.decimals)
        amount1 = convert_token_to_decimal(event.amount1, token1.decimals)
        amount0_abs = abs(amount0)
        amount1_abs = abs(amount1)

        amount0_usd = amount0_abs * token0.derived_eth * bundle.eth_price_usd
        amount1_usd = amount1_abs * token1.derived_eth * bundle.eth_price_usd

        tracked_usd = get_tracked_amount_usd(
            amount0_abs, token0, amount1_abs, token1, self.settings.whitelist_tokens, bundle
        )
        tracked_eth = safe_div(tracked_usd, bundle.eth_price_usd)
        untracked_usd = (amount0_usd + amount1_usd) / TWO_BD

        fee_tier = Decimal(pool.fee_tier)
        fees_eth = tracked_eth * fee_tier / FEE_TIER_DENOMINATOR
        fees_usd = tracked_usd * fee_tier / FEE_TIER_DENOMINATOR

        remove_pool_tvl_from_factory(factory, pool)
        factory.tx_count += 1
        factory.total_volume_eth += tracked_eth
        factory.total_volume_usd += tracked_usd
        factory.untracked_volume_usd += untracked_usd
        factory.total_fees_eth += fees_eth
        factory.total_fees_usd += fees_usd

        pool.tx_count += 1
        pool.volume_token0 += amount0_abs
        pool.volume_token1 += amount1_abs
        pool.volume_usd += tracked_usd
        pool.untracked_volume_usd += untracked_usd
        pool.fees_usd += fees_usd
        pool.liquidity = event.liquidity
        pool.tick = event.tick
        pool.sqrt_price = event.sqrt_price_x96
        pool.total_value_locked_token0 += amount0
        pool.total_value_locked_token1 += amount1

        for token, amount, amount_abs in ((token0, amount0, amount0_abs), (token1, amount1, amount1_abs)):
            token.volume += amount_abs
            token.total_value_locked += amount
            token.volume_usd += tracked_usd
            token.untracked_volume_usd += untracked_usd
            token.fees_usd += fees_usd
            token.tx_count += 1

        pool.token0_price, pool.token1_price = sqrt_price_x96_to_token_prices(pool.sqrt_price, token0, token1)
        context.set(pool)

        bundle.eth_price_usd = await self._native_price_in_usd(context)
        context.set(bundle)

        await self._refresh_derived_prices(token0, token1, bundle, context)
        transaction = await load_transaction(
            context, event.transaction_hash, event.block_number, event.block_timestamp, event.chain_id
        )

        recompute_pool_tvl(pool, token0, token1, bundle)
        add_pool_tvl_to_factory(factory, pool, bundle)
        refresh_token_tvl_usd(token0, bundle)
        refresh_token_tvl_usd(token1, bundle)

        context.set(Swap(
            id=event_record_id(transaction.id, event.log_index),
            chain_id=event.chain_id,
            transaction_id=transaction.id,
            timestamp=transaction.timestamp,
            pool_id=pool.id,
            token0_id=pool.token0_id,
            token1_id=pool.token1_id,
            sender=event.sender,
            recipient=event.recipient,
            origin=event.transaction_from,
            amount0=amount0,
            amount1=amount1,
            amount_usd=tracked_usd,
            sqrt_price_x96=event.sqrt_price_x96,
            tick=event.tick,
            log_index=event.log_index,
        ))

        fee_growth0, fee_growth1 = await self._backfill_fee_growth(context, pool, event)
        buckets = await update_all_intervals(
            context, factory, pool, token0, token1, bundle, event.block_timestamp,
            fee_growth0, fee_growth1,
        )
        record_protocol_volume(buckets.uniswap_day, tracked_eth, tracked_usd, untracked_usd, fees_usd)
        for pool_bucket in (buckets.pool_day, buckets.pool_hour):
            record_pool_volume(pool_bucket, amount0_abs, amount1_abs, tracked_usd, fees_usd)
        for token_bucket, amount_abs in (
            (buckets.token0_day, amount0_abs),
            (buckets.token0_hour, amount0_abs),
            (buckets.token1_day, amount1_abs),
            (buckets.token1_hour, amount1_abs),
        ):
            record_token_volume(token_bucket, amount_abs, tracked_usd, untracked_usd, fees_usd)

        context.set(token0)
        context.set(token1)
        context.set(pool)
        context.set(factory)
        return ProcessorResult(
            success=True,
            metadata={"amount_usd": str(tracked_usd), "eth_price_usd": str(bundle.eth_price_usd)},
        )
