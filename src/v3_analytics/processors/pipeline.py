"""
Per-chain event pipeline.

Routes each event to its processor inside a fresh EntityContext. A successful
or skipped event is committed; a failed or raising event is rolled back so
that none of its partial writes reach the store.
"""

import logging
from typing import Any, Dict, Iterable, List

from v3_analytics.core.storage.base import EntityStoreInterface, StorageError
from v3_analytics.core.storage.context import EntityContext
from .base import BaseEventProcessor, ChainRuntime, ProcessorError, ProcessorResult
from .events import PoolEvent
from .factory_processor import PoolCreatedProcessor
from .liquidity_processor import BurnProcessor, CollectProcessor, MintProcessor
from .swap_processor import InitializeProcessor, SwapProcessor

logger = logging.getLogger(__name__)

PROCESSOR_CLASSES = (
    PoolCreatedProcessor,
    InitializeProcessor,
    MintProcessor,
    BurnProcessor,
    SwapProcessor,
    CollectProcessor,
)


class EventPipeline:
    """
    Apply one chain's events to an entity store, one unit of work per event.

    Events must be supplied in chain order (block number, then log index).
    """

    def __init__(self, store: EntityStoreInterface, runtime: ChainRuntime):
        self.store = store
        self.runtime = runtime
        self.processors: Dict[str, BaseEventProcessor] = {
            cls.EVENT_NAME: cls(runtime) for cls in PROCESSOR_CLASSES
        }

    def get_processor(self, event: PoolEvent) -> BaseEventProcessor:
        """
        Raises:
            ProcessorError: If no processor handles the event type
        """
        processor = self.processors.get(event.NAME)
        if processor is None:
            raise ProcessorError(f"No processor for event type: {event.NAME}")
        return processor

    async def process_event(self, event: PoolEvent) -> ProcessorResult:
        """
        Process one event and commit or roll back its writes.

        A StorageError, raised while processing or while committing, yields a
        failed result flagged ``storage_error`` in its metadata; the store may
        hold part of the event's writes and the chain cannot safely continue.
        """
        if event.chain_id != self.runtime.chain_id:
            return ProcessorResult(
                success=False,
                error=f"Event for chain {event.chain_id} sent to chain {self.runtime.chain_id} pipeline",
            )

        processor = self.get_processor(event)
        context = EntityContext(self.store)
        try:
            result = await processor.process(event, context)
            if result.failed:
                context.rollback()
            else:
                written = await context.commit()
                result.metadata = {**(result.metadata or {}), "entities_written": written}
        except Exception as e:
            context.rollback()
            logger.error(
                f"Error processing {event.NAME} on chain {event.chain_id} "
                f"at block {event.block_number} log {event.log_index}: {e}",
                exc_info=True,
            )
            metadata = {"storage_error": True} if isinstance(e, StorageError) else None
            return ProcessorResult(success=False, error=str(e), metadata=metadata)

        processor.log_result(event, result)
        return result

    async def process_events(self, events: Iterable[PoolEvent]) -> Dict[str, Any]:
        """
        Process events in order, continuing past failures.

        Processing stops at the first storage error; ``halted`` is then True
        and ``unprocessed`` counts the events that were not attempted.

        Returns:
            Dict with completed/failed/skipped counts and the failed results
        """
        events = list(events)
        completed = 0
        failed = 0
        skipped = 0
        halted = False
        failures: List[Dict[str, Any]] = []

        for event in events:
            result = await self.process_event(event)
            if result.failed:
                failed += 1
                failures.append({
                    "event": event.NAME,
                    "block_number": event.block_number,
                    "log_index": event.log_index,
                    "error": result.error,
                })
                if (result.metadata or {}).get("storage_error"):
                    halted = True
                    logger.error(
                        f"Stopping chain {self.runtime.chain_id} at block {event.block_number} "
                        f"log {event.log_index} after a storage error"
                    )
                    break
            elif result.skipped:
                skipped += 1
            else:
                completed += 1

        total = completed + failed + skipped
        return {
            "completed": completed,
            "failed": failed,
            "skipped": skipped,
            "total": total,
            "halted": halted,
            "unprocessed": len(events) - total,
            "failures": failures,
        }
