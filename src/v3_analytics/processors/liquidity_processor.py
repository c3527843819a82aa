"""
Liquidity event processors: Mint, Burn and Collect.

Mint adds a position's token amounts to the pool's locked value and its
liquidity to the boundary ticks. Burn removes the position's liquidity but
leaves the tokens in the pool as owed amounts; they leave the pool's locked
value only when Collect withdraws them.
"""

from decimal import Decimal

from v3_analytics.core.storage.context import EntityContext
from v3_analytics.ledger.entity_types import Burn, Collect, Mint, Tick, Token
from v3_analytics.ledger.intervals import update_all_intervals
from v3_analytics.ledger.state import (
    add_pool_tvl_to_factory,
    recompute_pool_tvl,
    refresh_token_tvl_usd,
    remove_pool_tvl_from_factory,
)
from v3_analytics.ledger.ticks import apply_burn, apply_mint, create_tick, is_active_range
from v3_analytics.ledger.transactions import load_transaction
from v3_analytics.pricing.oracle import get_tracked_amount_usd
from v3_analytics.pricing.v3_math import convert_token_to_decimal
from v3_analytics.utils.ids import event_record_id, tick_id
from .base import BaseEventProcessor, ProcessorResult
from .events import BurnEvent, CollectEvent, MintEvent


def _amount_usd(amount0: Decimal, token0: Token, amount1: Decimal, token1: Token, eth_price_usd: Decimal) -> Decimal:
    """USD value of both legs at the tokens' current prices."""
    return (
        amount0 * token0.derived_eth * eth_price_usd
        + amount1 * token1.derived_eth * eth_price_usd
    )


class MintProcessor(BaseEventProcessor):
    """Applies a position mint to the pool, factory, tokens and ticks."""

    EVENT_NAME = MintEvent.NAME

    async def process(self, event: MintEvent, context: EntityContext) -> ProcessorResult:
        bundle = await self._load_bundle(context)
        if bundle is None:
            return self._missing(f"bundle {self.runtime.bundle_id}", event)
        pool = await self._load_pool(context, event)
        if pool is None:
            return self._missing(f"pool {event.src_address}", event)
        factory = await self._load_factory(context)
        if factory is None:
            return self._missing(f"factory {self.runtime.factory_id}", event)

        token0, token1 = await self._load_tokens(context, pool)
        if token0 is None or token1 is None:
            return self._skipped(f"tokens of pool {pool.id} not indexed", event)

        amount0 = convert_token_to_decimal(event.amount0, token0.decimals)
        amount1 = convert_token_to_decimal(event.amount1, token1.decimals)
        amount_usd = _amount_usd(amount0, token0, amount1, token1, bundle.eth_price_usd)

        remove_pool_tvl_from_factory(factory, pool)
        factory.tx_count += 1

        for token, amount in ((token0, amount0), (token1, amount1)):
            token.tx_count += 1
            token.total_value_locked += amount
            refresh_token_tvl_usd(token, bundle)

        pool.tx_count += 1
        if is_active_range(event.tick_lower, event.tick_upper, pool.tick):
            pool.liquidity += event.amount

        pool.total_value_locked_token0 += amount0
        pool.total_value_locked_token1 += amount1
        recompute_pool_tvl(pool, token0, token1, bundle)
        add_pool_tvl_to_factory(factory, pool, bundle)

        transaction = await load_transaction(
            context, event.transaction_hash, event.block_number, event.block_timestamp, event.chain_id
        )
        context.set(Mint(
            id=event_record_id(transaction.id, event.log_index),
            chain_id=event.chain_id,
            transaction_id=transaction.id,
            timestamp=transaction.timestamp,
            pool_id=pool.id,
            token0_id=pool.token0_id,
            token1_id=pool.token1_id,
            owner=event.owner,
            sender=event.sender,
            origin=event.transaction_from,
            amount=event.amount,
            amount0=amount0,
            amount1=amount1,
            amount_usd=amount_usd,
            tick_lower=event.tick_lower,
            tick_upper=event.tick_upper,
            log_index=event.log_index,
        ))

        lower_tick = await self._load_or_create_tick(context, event, pool.id, event.tick_lower)
        upper_tick = await self._load_or_create_tick(context, event, pool.id, event.tick_upper)
        apply_mint(lower_tick, upper_tick, event.amount)
        context.set(lower_tick)
        context.set(upper_tick)

        fee_growth0, fee_growth1 = await self._backfill_fee_growth(context, pool, event)
        await update_all_intervals(
            context, factory, pool, token0, token1, bundle, event.block_timestamp,
            fee_growth0, fee_growth1,
        )

        context.set(token0)
        context.set(token1)
        context.set(pool)
        context.set(factory)
        return ProcessorResult(success=True)

    async def _load_or_create_tick(
        self, context: EntityContext, event: MintEvent, pool_id: str, tick_idx: int
    ) -> Tick:
        tick_key = tick_id(event.src_address, tick_idx, event.chain_id)
        tick = await context.get(Tick, tick_key)
        if tick is None:
            tick = create_tick(
                tick_key, tick_idx, pool_id, event.src_address,
                event.block_timestamp, event.block_number, event.chain_id,
            )
        return tick


class BurnProcessor(BaseEventProcessor):
    """Removes a position's liquidity from the pool and its ticks."""

    EVENT_NAME = BurnEvent.NAME

    async def process(self, event: BurnEvent, context: EntityContext) -> ProcessorResult:
        bundle = await self._load_bundle(context)
        if bundle is None:
            return self._missing(f"bundle {self.runtime.bundle_id}", event)
        pool = await self._load_pool(context, event)
        if pool is None:
            return self._missing(f"pool {event.src_address}", event)
        factory = await self._load_factory(context)
        if factory is None:
            return self._missing(f"factory {self.runtime.factory_id}", event)

        token0, token1 = await self._load_tokens(context, pool)
        if token0 is None or token1 is None:
            return self._skipped(f"tokens of pool {pool.id} not indexed", event)

        amount0 = convert_token_to_decimal(event.amount0, token0.decimals)
        amount1 = convert_token_to_decimal(event.amount1, token1.decimals)
        amount_usd = _amount_usd(amount0, token0, amount1, token1, bundle.eth_price_usd)

        factory.tx_count += 1
        token0.tx_count += 1
        token1.tx_count += 1
        pool.tx_count += 1

        if is_active_range(event.tick_lower, event.tick_upper, pool.tick):
            pool.liquidity -= event.amount

        transaction = await load_transaction(
            context, event.transaction_hash, event.block_number, event.block_timestamp, event.chain_id
        )
        context.set(Burn(
            id=event_record_id(transaction.id, event.log_index),
            chain_id=event.chain_id,
            transaction_id=transaction.id,
            timestamp=transaction.timestamp,
            pool_id=pool.id,
            token0_id=pool.token0_id,
            token1_id=pool.token1_id,
            owner=event.owner,
            origin=event.transaction_from,
            amount=event.amount,
            amount0=amount0,
            amount1=amount1,
            amount_usd=amount_usd,
            tick_lower=event.tick_lower,
            tick_upper=event.tick_upper,
            log_index=event.log_index,
        ))

        lower_tick = await context.get(Tick, tick_id(event.src_address, event.tick_lower, event.chain_id))
        upper_tick = await context.get(Tick, tick_id(event.src_address, event.tick_upper, event.chain_id))
        if lower_tick is not None and upper_tick is not None:
            apply_burn(lower_tick, upper_tick, event.amount)
            context.set(lower_tick)
            context.set(upper_tick)
        else:
            self.logger.warning(
                f"Burn on pool {pool.id} references unknown ticks "
                f"{event.tick_lower}/{event.tick_upper}"
            )

        fee_growth0, fee_growth1 = await self._backfill_fee_growth(context, pool, event)
        await update_all_intervals(
            context, factory, pool, token0, token1, bundle, event.block_timestamp,
            fee_growth0, fee_growth1,
        )

        context.set(token0)
        context.set(token1)
        context.set(pool)
        context.set(factory)
        return ProcessorResult(success=True)


class CollectProcessor(BaseEventProcessor):
    """Withdraws collected amounts from the pool's locked value."""

    EVENT_NAME = CollectEvent.NAME

    async def process(self, event: CollectEvent, context: EntityContext) -> ProcessorResult:
        bundle = await self._load_bundle(context)
        if bundle is None:
            return self._missing(f"bundle {self.runtime.bundle_id}", event)
        pool = await self._load_pool(context, event)
        if pool is None:
            return self._skipped(f"pool {event.src_address} not indexed", event)
        factory = await self._load_factory(context)
        if factory is None:
            return self._missing(f"factory {self.runtime.factory_id}", event)

        token0, token1 = await self._load_tokens(context, pool)
        if token0 is None or token1 is None:
            return self._skipped(f"tokens of pool {pool.id} not indexed", event)

        amount0 = convert_token_to_decimal(event.amount0, token0.decimals)
        amount1 = convert_token_to_decimal(event.amount1, token1.decimals)
        tracked_amount_usd = get_tracked_amount_usd(
            amount0, token0, amount1, token1, self.settings.whitelist_tokens, bundle
        )

        remove_pool_tvl_from_factory(factory, pool)
        factory.tx_count += 1

        for token, amount in ((token0, amount0), (token1, amount1)):
            token.tx_count += 1
            token.total_value_locked -= amount
            refresh_token_tvl_usd(token, bundle)

        pool.tx_count += 1
        pool.total_value_locked_token0 -= amount0
        pool.total_value_locked_token1 -= amount1
        recompute_pool_tvl(pool, token0, token1, bundle)
        pool.collected_fees_token0 += amount0
        pool.collected_fees_token1 += amount1
        pool.collected_fees_usd += tracked_amount_usd
        add_pool_tvl_to_factory(factory, pool, bundle)

        transaction = await load_transaction(
            context, event.transaction_hash, event.block_number, event.block_timestamp, event.chain_id
        )
        context.set(Collect(
            id=event_record_id(transaction.id, event.log_index),
            chain_id=event.chain_id,
            transaction_id=transaction.id,
            timestamp=event.block_timestamp,
            pool_id=pool.id,
            owner=event.owner,
            amount0=amount0,
            amount1=amount1,
            amount_usd=tracked_amount_usd,
            tick_lower=event.tick_lower,
            tick_upper=event.tick_upper,
            log_index=event.log_index,
        ))

        fee_growth0, fee_growth1 = await self._backfill_fee_growth(context, pool, event)
        await update_all_intervals(
            context, factory, pool, token0, token1, bundle, event.block_timestamp,
            fee_growth0, fee_growth1,
        )

        context.set(token0)
        context.set(token1)
        context.set(pool)
        context.set(factory)
        return ProcessorResult(success=True)
