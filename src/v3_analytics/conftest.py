"""
Shared pytest fixtures for the v3 analytics engine.

The test chain uses 18-decimal tokens throughout so that pool prices derived
from Q96 square-root prices are exact Decimals.
"""

import itertools
from decimal import Decimal
from types import SimpleNamespace

import pytest

from v3_analytics.config.chains import ChainSettings
from v3_analytics.config.static_tokens import StaticTokenDefinition
from v3_analytics.core.storage.memory import InMemoryEntityStore
from v3_analytics.metadata.token_metadata import TokenMetadataResolver
from v3_analytics.processors.base import ChainRuntime
from v3_analytics.processors.events import (
    InitializeEvent,
    MintEvent,
    PoolCreatedEvent,
    SwapEvent,
)
from v3_analytics.processors.pipeline import EventPipeline
from v3_analytics.pricing.v3_math import Q96

TEST_TIMESTAMP = 1_700_000_000


@pytest.fixture
def chain():
    """Addresses of the test deployment."""
    return SimpleNamespace(
        chain_id=1,
        factory="0x" + "f" * 40,
        usdc="0x" + "a" * 40,
        tkn="0x" + "b" * 40,
        zero_decimals="0x" + "c" * 40,
        no_decimals="0x" + "d" * 40,
        weth="0x" + "e" * 40,
        # USDC/WETH, stablecoin is token0
        reference_pool="0x" + "1" * 40,
        # TKN/WETH
        tkn_pool="0x" + "2" * 40,
        skipped_pool="0x" + "3" * 40,
        sender="0x" + "9" * 40,
        timestamp=TEST_TIMESTAMP,
    )


@pytest.fixture
def chain_settings(chain):
    return ChainSettings(
        chain_id=chain.chain_id,
        name="testnet",
        factory_address=chain.factory,
        stablecoin_wrapped_native_pool_address=chain.reference_pool,
        stablecoin_is_token0=True,
        wrapped_native_address=chain.weth,
        minimum_native_locked=Decimal("1"),
        stablecoin_addresses=[chain.usdc],
        whitelist_tokens=[chain.weth, chain.usdc],
        token_overrides=[
            StaticTokenDefinition(chain.weth, "WETH", "Wrapped Ether", 18),
            StaticTokenDefinition(chain.usdc, "USDC", "USD Coin", 18),
            StaticTokenDefinition(chain.tkn, "TKN", "Test Token", 18, total_supply=10**24),
            StaticTokenDefinition(chain.zero_decimals, "ZERO", "Zero Decimals", 0),
        ],
        pools_to_skip=[chain.skipped_pool],
    )


@pytest.fixture
def metadata_resolver(chain_settings):
    return TokenMetadataResolver(chain_settings.token_overrides)


@pytest.fixture
def runtime(chain_settings, metadata_resolver):
    return ChainRuntime(settings=chain_settings, metadata_resolver=metadata_resolver)


@pytest.fixture
def store():
    return InMemoryEntityStore()


@pytest.fixture
def pipeline(store, runtime):
    return EventPipeline(store, runtime)


@pytest.fixture
def make_event(chain):
    """Build events with unique transaction hashes and increasing log indexes."""
    counter = itertools.count(1)

    def _make(event_cls, src_address, block_number=100, block_timestamp=None, **params):
        n = next(counter)
        return event_cls(
            chain_id=chain.chain_id,
            src_address=src_address,
            block_number=block_number,
            block_timestamp=block_timestamp if block_timestamp is not None else chain.timestamp,
            transaction_hash=f"0x{n:064x}",
            log_index=n,
            transaction_from=chain.sender,
            **params,
        )

    return _make


@pytest.fixture
def create_pools(pipeline, make_event, chain):
    """Register the reference pool (fee 500) and the TKN/WETH pool (fee 3000)."""

    async def _create():
        results = []
        for pool, token0, token1, fee in (
            (chain.reference_pool, chain.usdc, chain.weth, 500),
            (chain.tkn_pool, chain.tkn, chain.weth, 3000),
        ):
            results.append(await pipeline.process_event(make_event(
                PoolCreatedEvent, chain.factory,
                token0=token0, token1=token1, fee=fee, tick_spacing=60, pool=pool,
            )))
        return results

    return _create


@pytest.fixture
def price_reference_pool(pipeline, make_event, chain):
    """
    Initialize, fund and swap the reference pool so the native price is 4 USD.

    The pool ends with 4004 USDC and 999 WETH locked.
    """

    async def _price():
        sqrt_price = Q96 // 2
        results = [
            await pipeline.process_event(make_event(
                InitializeEvent, chain.reference_pool, sqrt_price_x96=sqrt_price, tick=-13863,
            )),
            await pipeline.process_event(make_event(
                MintEvent, chain.reference_pool,
                sender=chain.sender, owner=chain.sender, tick_lower=-20000, tick_upper=0,
                amount=10**21, amount0=4000 * 10**18, amount1=1000 * 10**18,
            )),
            await pipeline.process_event(make_event(
                SwapEvent, chain.reference_pool,
                sender=chain.sender, recipient=chain.sender,
                amount0=4 * 10**18, amount1=-(10**18),
                sqrt_price_x96=sqrt_price, liquidity=10**21, tick=-13863,
            )),
        ]
        return results

    return _price
