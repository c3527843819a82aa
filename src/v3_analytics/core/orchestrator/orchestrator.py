"""
Multi-chain event orchestrator.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from web3 import Web3

from v3_analytics.config.manager import ConfigManager
from v3_analytics.core.storage.base import EntityStoreInterface
from v3_analytics.metadata.fee_growth import Web3FeeGrowthBackfill
from v3_analytics.metadata.token_metadata import TokenMetadataResolver
from v3_analytics.processors.base import ChainRuntime
from v3_analytics.processors.events import PoolEvent
from v3_analytics.processors.pipeline import EventPipeline

logger = logging.getLogger(__name__)


class ChainOrchestrator:
    """
    Runs one EventPipeline per chain over a shared entity store.

    Every entity id carries its chain id, so chains never touch the same
    records: each chain's events are applied strictly in order while
    different chains run concurrently.
    """

    def __init__(self, store: EntityStoreInterface, runtimes: Dict[int, ChainRuntime]):
        """
        Initialize the orchestrator.

        Args:
            store: Entity store shared by all chains
            runtimes: Chain runtime per chain id
        """
        self.store = store
        self.runtimes = runtimes
        self.pipelines: Dict[int, EventPipeline] = {
            chain_id: EventPipeline(store, runtime) for chain_id, runtime in runtimes.items()
        }

    @classmethod
    def from_config(
        cls,
        config: ConfigManager,
        store: EntityStoreInterface,
        chain_ids: Optional[List[int]] = None,
    ) -> "ChainOrchestrator":
        """
        Build runtimes for the enabled chains (or the given subset).

        Token metadata is read over each chain's RPC endpoint. Fee growth
        backfill is only wired when ENABLE_FEE_GROWTH_BACKFILL is set.
        """
        enabled = config.chains.enabled_chains
        if chain_ids is not None:
            enabled = {chain_id: config.get_chain_settings(chain_id) for chain_id in chain_ids}

        runtimes = {}
        for chain_id, settings in enabled.items():
            web3 = Web3(Web3.HTTPProvider(settings.rpc_url)) if settings.rpc_url else None
            fee_growth_backfill = None
            if config.storage.ENABLE_FEE_GROWTH_BACKFILL and web3 is not None:
                fee_growth_backfill = Web3FeeGrowthBackfill(web3)
            runtimes[chain_id] = ChainRuntime(
                settings=settings,
                metadata_resolver=TokenMetadataResolver(settings.token_overrides, web3),
                fee_growth_backfill=fee_growth_backfill,
            )
            logger.info(
                f"Prepared {settings.name} (chain {chain_id}), "
                f"fee growth backfill {'on' if fee_growth_backfill else 'off'}"
            )
        return cls(store, runtimes)

    async def run(self, events: Iterable[PoolEvent]) -> Dict[str, Any]:
        """
        Process events for all chains.

        Events are grouped by chain and sorted by (block number, log index)
        before processing. Events for chains without a runtime are counted
        as unrouted and dropped. A chain that hits a storage error or raises
        stops on its own; the other chains still run to completion.

        Returns:
            Dict with per-chain stats and overall totals
        """
        by_chain: Dict[int, List[PoolEvent]] = defaultdict(list)
        unrouted = 0
        for event in events:
            if event.chain_id not in self.pipelines:
                unrouted += 1
                continue
            by_chain[event.chain_id].append(event)

        if unrouted:
            logger.warning(f"Dropped {unrouted} events for chains without a runtime")

        chain_ids = sorted(by_chain)
        logger.info(f"Processing {sum(len(v) for v in by_chain.values())} events on {len(chain_ids)} chains")

        outcomes = await asyncio.gather(
            *(self._run_chain(chain_id, by_chain[chain_id]) for chain_id in chain_ids),
            return_exceptions=True,
        )
        results = {}
        for chain_id, outcome in zip(chain_ids, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                outcome = self._aborted_chain_stats(chain_id, by_chain[chain_id], outcome)
            results[chain_id] = outcome
        stats = list(results.values())

        return {
            "completed": sum(s["completed"] for s in stats),
            "failed": sum(s["failed"] for s in stats),
            "skipped": sum(s["skipped"] for s in stats),
            "total": sum(s["total"] for s in stats),
            "unrouted": unrouted,
            "halted_chains": [chain_id for chain_id, s in results.items() if s["halted"]],
            "results": results,
        }

    def _aborted_chain_stats(self, chain_id: int, events: List[PoolEvent], error: Exception) -> Dict[str, Any]:
        """Stats for a chain whose run raised; none of its events are counted as applied."""
        logger.error(f"❌ chain {chain_id} aborted: {error}", exc_info=error)
        return {
            "completed": 0,
            "failed": len(events),
            "skipped": 0,
            "total": len(events),
            "halted": True,
            "unprocessed": 0,
            "failures": [{"event": None, "block_number": None, "log_index": None, "error": str(error)}],
        }

    async def _run_chain(self, chain_id: int, events: List[PoolEvent]) -> Dict[str, Any]:
        events = sorted(events, key=lambda e: e.sort_key)
        stats = await self.pipelines[chain_id].process_events(events)
        name = self.runtimes[chain_id].settings.name
        if stats["halted"]:
            logger.error(
                f"❌ {name}: stopped after a storage error, {stats['unprocessed']} events not processed"
            )
        elif stats["failed"]:
            logger.warning(
                f"❌ {name}: {stats['failed']} of {stats['total']} events failed"
            )
        else:
            logger.info(
                f"✅ {name}: {stats['completed']} events processed, {stats['skipped']} skipped"
            )
        return stats
