"""
Tests for the multi-chain orchestrator.
"""

import dataclasses
from unittest.mock import Mock, patch

import pytest

from v3_analytics.core.storage.base import DataError
from v3_analytics.core.storage.memory import InMemoryEntityStore
from v3_analytics.metadata.fee_growth import Web3FeeGrowthBackfill
from v3_analytics.processors.base import ChainRuntime
from v3_analytics.processors.events import MintEvent, PoolCreatedEvent
from v3_analytics.metadata.token_metadata import TokenMetadataResolver
from v3_analytics.utils.ids import get_id
from ..orchestrator import ChainOrchestrator


@pytest.fixture
def second_chain_settings(chain_settings):
    return dataclasses.replace(chain_settings, chain_id=10, name="second")


@pytest.fixture
def orchestrator(store, runtime, second_chain_settings):
    second_runtime = ChainRuntime(
        settings=second_chain_settings,
        metadata_resolver=TokenMetadataResolver(second_chain_settings.token_overrides),
    )
    return ChainOrchestrator(store, {1: runtime, 10: second_runtime})


def chain_events(make_event, chain, chain_id):
    """PoolCreated followed by a Mint on the reference pool, for one chain."""
    created = make_event(
        PoolCreatedEvent, chain.factory,
        token0=chain.usdc, token1=chain.weth, fee=500, tick_spacing=10, pool=chain.reference_pool,
    )
    mint = make_event(
        MintEvent, chain.reference_pool,
        sender=chain.sender, owner=chain.sender, tick_lower=-10, tick_upper=10,
        amount=1000, amount0=10**18, amount1=10**18,
    )
    return [dataclasses.replace(e, chain_id=chain_id) for e in (created, mint)]


class TestChainOrchestrator:

    @pytest.mark.asyncio
    async def test_runs_each_chain_in_order(self, orchestrator, make_event, store, chain):
        mainnet = chain_events(make_event, chain, 1)
        second = chain_events(make_event, chain, 10)

        # deliver mints ahead of pool creation
        stats = await orchestrator.run([mainnet[1], second[1], second[0], mainnet[0]])

        assert stats["completed"] == 4
        assert stats["failed"] == 0
        assert stats["total"] == 4
        assert stats["results"][1]["completed"] == 2
        assert stats["results"][10]["completed"] == 2

        for chain_id in (1, 10):
            pool = await store.get("Pool", get_id(chain.reference_pool, chain_id))
            assert pool.tx_count == 1
            assert pool.total_value_locked_token0 == 1

    @pytest.mark.asyncio
    async def test_unrouted_events_are_dropped(self, orchestrator, make_event, store, chain):
        events = chain_events(make_event, chain, 137)

        stats = await orchestrator.run(events)

        assert stats["unrouted"] == 2
        assert stats["total"] == 0
        assert stats["results"] == {}
        assert store.count() == 0

    @pytest.mark.asyncio
    async def test_failures_on_one_chain_do_not_stop_another(self, orchestrator, make_event, store, chain):
        mainnet = chain_events(make_event, chain, 1)
        # mint on chain 10 before any pool exists there
        orphan_mint = chain_events(make_event, chain, 10)[1]

        stats = await orchestrator.run(mainnet + [orphan_mint])

        assert stats["completed"] == 2
        assert stats["failed"] == 1
        assert stats["results"][10]["failures"][0]["event"] == "Mint"
        assert await store.get("Pool", get_id(chain.reference_pool, 1)) is not None


class TestFromConfig:

    def _config(self, settings_by_chain, backfill_enabled):
        config = Mock()
        config.chains.enabled_chains = settings_by_chain
        config.get_chain_settings.side_effect = lambda chain_id: settings_by_chain[chain_id]
        config.storage.ENABLE_FEE_GROWTH_BACKFILL = backfill_enabled
        return config

    def test_builds_runtime_per_enabled_chain(self, store, chain_settings, second_chain_settings):
        config = self._config({1: chain_settings, 10: second_chain_settings}, backfill_enabled=True)

        with patch("v3_analytics.core.orchestrator.orchestrator.Web3") as web3_cls:
            orchestrator = ChainOrchestrator.from_config(config, store)

        assert sorted(orchestrator.pipelines) == [1, 10]
        # no RPC URL configured: overrides only and no backfill
        web3_cls.assert_not_called()
        assert orchestrator.runtimes[1].fee_growth_backfill is None
        assert orchestrator.runtimes[1].metadata_resolver.web3 is None

    def test_rpc_url_enables_web3_collaborators(self, store, chain_settings):
        settings = dataclasses.replace(chain_settings, rpc_url="http://localhost:8545")
        config = self._config({1: settings}, backfill_enabled=True)

        with patch("v3_analytics.core.orchestrator.orchestrator.Web3") as web3_cls:
            orchestrator = ChainOrchestrator.from_config(config, store)

        web3_cls.HTTPProvider.assert_called_once_with("http://localhost:8545")
        runtime = orchestrator.runtimes[1]
        assert isinstance(runtime.fee_growth_backfill, Web3FeeGrowthBackfill)
        assert runtime.fee_growth_backfill.web3 is web3_cls.return_value
        assert runtime.metadata_resolver.web3 is web3_cls.return_value

    def test_backfill_disabled(self, store, chain_settings):
        settings = dataclasses.replace(chain_settings, rpc_url="http://localhost:8545")
        config = self._config({1: settings}, backfill_enabled=False)

        with patch("v3_analytics.core.orchestrator.orchestrator.Web3"):
            orchestrator = ChainOrchestrator.from_config(config, store)

        assert orchestrator.runtimes[1].fee_growth_backfill is None

    def test_chain_subset(self, store, chain_settings, second_chain_settings):
        config = self._config({1: chain_settings, 10: second_chain_settings}, backfill_enabled=False)

        orchestrator = ChainOrchestrator.from_config(config, store, chain_ids=[10])

        assert list(orchestrator.runtimes) == [10]
        assert orchestrator.runtimes[10].settings.name == "second"


class ChainFailingStore(InMemoryEntityStore):
    """Rejects every write for one chain."""

    def __init__(self, failing_chain_id):
        super().__init__()
        self.failing_chain_id = failing_chain_id

    async def set(self, entity):
        if entity.chain_id == self.failing_chain_id:
            raise DataError("disk full")
        await super().set(entity)


class TestChainIsolation:

    @pytest.fixture
    def failing_store(self):
        return ChainFailingStore(failing_chain_id=10)

    @pytest.fixture
    def isolated_orchestrator(self, failing_store, chain_settings, second_chain_settings):
        runtimes = {
            settings.chain_id: ChainRuntime(
                settings=settings,
                metadata_resolver=TokenMetadataResolver(settings.token_overrides),
            )
            for settings in (chain_settings, second_chain_settings)
        }
        return ChainOrchestrator(failing_store, runtimes)

    @pytest.mark.asyncio
    async def test_storage_error_stops_only_its_chain(self, isolated_orchestrator, failing_store, make_event, chain):
        events = chain_events(make_event, chain, 1) + chain_events(make_event, chain, 10)

        stats = await isolated_orchestrator.run(events)

        assert stats["results"][1]["completed"] == 2
        assert stats["results"][1]["halted"] is False

        second = stats["results"][10]
        assert second["halted"] is True
        assert second["failed"] == 1
        assert second["unprocessed"] == 1
        assert "disk full" in second["failures"][0]["error"]
        assert stats["halted_chains"] == [10]

        pool = await failing_store.get("Pool", get_id(chain.reference_pool, 1))
        assert pool.tx_count == 1

    @pytest.mark.asyncio
    async def test_raising_chain_is_reported_as_failed(self, orchestrator, make_event, chain):
        events = chain_events(make_event, chain, 1) + chain_events(make_event, chain, 10)

        with patch.object(orchestrator.pipelines[10], "process_events", side_effect=RuntimeError("rpc down")):
            stats = await orchestrator.run(events)

        assert stats["results"][1]["completed"] == 2
        assert stats["results"][10]["failed"] == 2
        assert stats["results"][10]["failures"][0]["error"] == "rpc down"
        assert stats["halted_chains"] == [10]
        assert stats["completed"] == 2
        assert stats["failed"] == 2
