"""
Tests for Mint, Burn and Collect processing.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

from v3_analytics.ledger.intervals import get_hour_index
from v3_analytics.metadata.fee_growth import FeeGrowthBackfill
from v3_analytics.pricing.v3_math import Q96
from v3_analytics.utils.ids import bucket_id, get_id, tick_id
from ..events import BurnEvent, CollectEvent, InitializeEvent, MintEvent


@pytest.fixture
def mint(pipeline, make_event, chain):
    async def _mint(pool, tick_lower, tick_upper, amount, amount0=0, amount1=0, **kwargs):
        return await pipeline.process_event(make_event(
            MintEvent, pool,
            sender=chain.sender, owner=chain.sender,
            tick_lower=tick_lower, tick_upper=tick_upper,
            amount=amount, amount0=amount0, amount1=amount1, **kwargs,
        ))
    return _mint


@pytest.fixture
def burn(pipeline, make_event, chain):
    async def _burn(pool, tick_lower, tick_upper, amount, amount0=0, amount1=0):
        return await pipeline.process_event(make_event(
            BurnEvent, pool,
            owner=chain.sender, tick_lower=tick_lower, tick_upper=tick_upper,
            amount=amount, amount0=amount0, amount1=amount1,
        ))
    return _burn


async def initialize(pipeline, make_event, pool, tick):
    return await pipeline.process_event(make_event(
        InitializeEvent, pool, sqrt_price_x96=Q96, tick=tick,
    ))


class TestMintProcessor:

    @pytest.mark.asyncio
    async def test_requires_registered_pool(self, mint, store, chain):
        result = await mint(chain.reference_pool, -60, 60, 10**18)

        assert result.failed
        assert "bundle" in result.error
        assert store.count() == 0

    @pytest.mark.asyncio
    async def test_mint_books_locked_value(self, create_pools, price_reference_pool, store, chain):
        await create_pools()
        results = await price_reference_pool()
        assert all(r.success for r in results)

        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.total_value_locked_token0 == Decimal("4004")
        assert pool.total_value_locked_token1 == Decimal("999")
        assert pool.total_value_locked_eth == Decimal("2000")
        assert pool.total_value_locked_usd == Decimal("8000")

        factory = await store.get("Factory", get_id(chain.factory, 1))
        assert factory.total_value_locked_eth == Decimal("2000")
        assert factory.total_value_locked_usd == Decimal("8000")

        bundle = await store.get("Bundle", "1")
        assert bundle.eth_price_usd == Decimal("4")
        usdc = await store.get("Token", get_id(chain.usdc, 1))
        assert usdc.derived_eth == Decimal("0.25")

    @pytest.mark.asyncio
    async def test_mint_record_and_usd_value(self, create_pools, price_reference_pool, pipeline, make_event, store, chain):
        await create_pools()
        await price_reference_pool()
        await initialize(pipeline, make_event, chain.tkn_pool, 13863)

        event = make_event(
            MintEvent, chain.tkn_pool,
            sender=chain.sender, owner=chain.sender, tick_lower=0, tick_upper=20000,
            amount=10**20, amount0=250 * 10**18, amount1=1000 * 10**18,
        )
        result = await pipeline.process_event(event)

        assert result.success
        record = await store.get("Mint", f"{get_id(event.transaction_hash, 1)}-{event.log_index}")
        assert record.amount0 == Decimal("250")
        assert record.amount1 == Decimal("1000")
        # TKN is still unpriced, only the WETH leg counts
        assert record.amount_usd == Decimal("4000")
        assert record.origin == chain.sender

        transaction = await store.get("Transaction", get_id(event.transaction_hash, 1))
        assert transaction.block_number == 100
        assert transaction.timestamp == chain.timestamp

        factory = await store.get("Factory", get_id(chain.factory, 1))
        assert factory.total_value_locked_eth == Decimal("3000")

    @pytest.mark.asyncio
    async def test_liquidity_follows_active_range(self, create_pools, mint, pipeline, make_event, store, chain):
        await create_pools()
        await initialize(pipeline, make_event, chain.reference_pool, 0)

        # tick 0 sits inside [0, 10)
        await mint(chain.reference_pool, 0, 10, 500)
        await mint(chain.reference_pool, 10, 20, 700)
        await mint(chain.reference_pool, -10, 0, 900)

        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.liquidity == 500

    @pytest.mark.asyncio
    async def test_uninitialized_pool_keeps_liquidity(self, create_pools, mint, store, chain):
        await create_pools()

        result = await mint(chain.tkn_pool, -60, 60, 10**18)

        assert result.success
        pool = await store.get("Pool", get_id(chain.tkn_pool, 1))
        assert pool.tick is None
        assert pool.liquidity == 0

    @pytest.mark.asyncio
    async def test_mint_creates_boundary_ticks(self, create_pools, mint, store, chain):
        await create_pools()
        await mint(chain.tkn_pool, -60, 60, 1000)
        await mint(chain.tkn_pool, -60, 120, 250)

        lower = await store.get("Tick", tick_id(chain.tkn_pool, -60, 1))
        upper = await store.get("Tick", tick_id(chain.tkn_pool, 60, 1))
        outer = await store.get("Tick", tick_id(chain.tkn_pool, 120, 1))

        assert (lower.liquidity_gross, lower.liquidity_net) == (1250, 1250)
        assert (upper.liquidity_gross, upper.liquidity_net) == (1000, -1000)
        assert (outer.liquidity_gross, outer.liquidity_net) == (250, -250)
        assert lower.pool_id == get_id(chain.tkn_pool, 1)
        assert lower.created_at_block_number == 100


class TestBurnProcessor:

    @pytest.mark.asyncio
    async def test_burn_reduces_ticks_but_not_locked_value(self, create_pools, price_reference_pool, burn, store, chain):
        await create_pools()
        await price_reference_pool()

        result = await burn(chain.reference_pool, -20000, 0, 5 * 10**20, 2000 * 10**18, 500 * 10**18)

        assert result.success
        lower = await store.get("Tick", tick_id(chain.reference_pool, -20000, 1))
        upper = await store.get("Tick", tick_id(chain.reference_pool, 0, 1))
        assert (lower.liquidity_gross, lower.liquidity_net) == (5 * 10**20, 5 * 10**20)
        assert (upper.liquidity_gross, upper.liquidity_net) == (5 * 10**20, -5 * 10**20)

        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.liquidity == 5 * 10**20
        assert pool.total_value_locked_token0 == Decimal("4004")
        assert pool.total_value_locked_eth == Decimal("2000")
        factory = await store.get("Factory", get_id(chain.factory, 1))
        assert factory.total_value_locked_eth == Decimal("2000")

    @pytest.mark.asyncio
    async def test_burn_on_unknown_ticks_still_succeeds(self, create_pools, price_reference_pool, burn, store, chain):
        await create_pools()
        await price_reference_pool()

        result = await burn(chain.reference_pool, 100, 200, 10)

        assert result.success
        assert await store.get("Tick", tick_id(chain.reference_pool, 100, 1)) is None
        burns = list(store.iter_entities("Burn"))
        assert len(burns) == 1

    @pytest.mark.asyncio
    async def test_liquidity_net_sums_to_zero(self, create_pools, mint, burn, store, chain):
        await create_pools()
        await mint(chain.tkn_pool, -120, 60, 1000)
        await mint(chain.tkn_pool, -60, 180, 300)
        await burn(chain.tkn_pool, -120, 60, 400)
        await mint(chain.tkn_pool, 60, 180, 75)

        ticks = [t for t in store.iter_entities("Tick") if t.pool_id == get_id(chain.tkn_pool, 1)]
        assert len(ticks) == 4
        assert sum(t.liquidity_net for t in ticks) == 0
        assert all(t.liquidity_gross >= 0 for t in ticks)

    @pytest.mark.asyncio
    async def test_active_tick_liquidity_matches_pool(self, create_pools, mint, burn, pipeline, make_event, store, chain):
        await create_pools()
        await initialize(pipeline, make_event, chain.tkn_pool, 5)
        pool_id = get_id(chain.tkn_pool, 1)

        steps = [
            (mint, -60, 60, 1000),
            (mint, 5, 120, 300),
            (mint, -120, 5, 450),
            (burn, -60, 60, 400),
            (mint, 60, 180, 75),
            (burn, 5, 120, 300),
            (mint, -180, -60, 20),
        ]
        for action, tick_lower, tick_upper, amount in steps:
            assert (await action(chain.tkn_pool, tick_lower, tick_upper, amount)).success

            pool = await store.get("Pool", pool_id)
            ticks = [t for t in store.iter_entities("Tick") if t.pool_id == pool_id]
            assert sum(t.liquidity_net for t in ticks if t.tick_idx <= pool.tick) == pool.liquidity

        assert pool.liquidity == 600


class TestCollectProcessor:

    @pytest.mark.asyncio
    async def test_collect_withdraws_locked_value(self, create_pools, price_reference_pool, pipeline, make_event, store, chain):
        await create_pools()
        await price_reference_pool()

        event = make_event(
            CollectEvent, chain.reference_pool,
            owner=chain.sender, recipient=chain.sender, tick_lower=-20000, tick_upper=0,
            amount0=4 * 10**18, amount1=10**18,
        )
        result = await pipeline.process_event(event)

        assert result.success
        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.total_value_locked_token0 == Decimal("4000")
        assert pool.total_value_locked_token1 == Decimal("998")
        assert pool.total_value_locked_eth == Decimal("1998")
        assert pool.total_value_locked_usd == Decimal("7992")
        assert pool.collected_fees_token0 == Decimal("4")
        assert pool.collected_fees_token1 == Decimal("1")
        # both sides whitelisted: average of the two 4 USD legs
        assert pool.collected_fees_usd == Decimal("4")

        factory = await store.get("Factory", get_id(chain.factory, 1))
        assert factory.total_value_locked_eth == Decimal("1998")

        usdc = await store.get("Token", get_id(chain.usdc, 1))
        assert usdc.total_value_locked == Decimal("4000")
        assert usdc.total_value_locked_usd == Decimal("4000")

        record = await store.get("Collect", f"{get_id(event.transaction_hash, 1)}-{event.log_index}")
        assert record.amount_usd == Decimal("4")
        assert record.timestamp == chain.timestamp

    @pytest.mark.asyncio
    async def test_collect_on_unknown_pool_is_skipped(self, create_pools, pipeline, make_event, store, chain):
        await create_pools()
        entities = store.count()

        result = await pipeline.process_event(make_event(
            CollectEvent, "0x" + "5" * 40,
            owner=chain.sender, recipient=chain.sender, tick_lower=0, tick_upper=60,
            amount0=1, amount1=1,
        ))

        assert result.success and result.skipped
        assert store.count() == entities


class TestFeeGrowthBackfill:

    @pytest.mark.asyncio
    async def test_fetched_once_per_hour_bucket(self, create_pools, mint, pipeline, make_event, runtime, store, chain):
        backfill = Mock(spec=FeeGrowthBackfill)
        backfill.fetch = AsyncMock(return_value=(111, 222))
        runtime.fee_growth_backfill = backfill
        await create_pools()

        await initialize(pipeline, make_event, chain.reference_pool, 0)
        await mint(chain.reference_pool, 0, 10, 500)

        backfill.fetch.assert_awaited_once_with(chain.reference_pool, 1, 100)
        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert (pool.fee_growth_global0_x128, pool.fee_growth_global1_x128) == (111, 222)

        hour = await store.get(
            "PoolHourData", bucket_id(chain.reference_pool, get_hour_index(chain.timestamp), 1)
        )
        assert (hour.fee_growth_global0_x128, hour.fee_growth_global1_x128) == (111, 222)

    @pytest.mark.asyncio
    async def test_failed_lookup_leaves_pool_untouched(self, create_pools, pipeline, make_event, runtime, store, chain):
        backfill = Mock(spec=FeeGrowthBackfill)
        backfill.fetch = AsyncMock(return_value=None)
        runtime.fee_growth_backfill = backfill
        await create_pools()

        result = await initialize(pipeline, make_event, chain.reference_pool, 0)

        assert result.success
        pool = await store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.fee_growth_global0_x128 is None
