"""
Base classes for the pool event processors.

Each processor applies one event type to the entity ledger through an
EntityContext. Processors never commit: they report a ProcessorResult and
the pipeline decides whether the staged writes are flushed or discarded.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
import logging

from v3_analytics.config.chains import ChainSettings
from v3_analytics.core.storage.context import EntityContext
from v3_analytics.ledger.entity_types import Bundle, Factory, Pool, Token
from v3_analytics.ledger.intervals import load_pool_hour_data
from v3_analytics.metadata.fee_growth import FeeGrowthBackfill
from v3_analytics.metadata.token_metadata import TokenMetadataResolver
from v3_analytics.pricing.oracle import find_native_per_token, get_native_price_in_usd
from v3_analytics.utils.ids import bundle_id, get_id
from .events import PoolEvent

logger = logging.getLogger(__name__)


class ProcessorError(Exception):
    """Base exception for processor errors."""
    pass


@dataclass
class ProcessorResult:
    """Result from processing one event."""
    success: bool
    skipped: bool = False
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def failed(self) -> bool:
        """Check if processing failed."""
        return not self.success


@dataclass
class ChainRuntime:
    """
    Chain settings plus the collaborators a processor may call out to.

    Attributes:
        settings: Pricing and indexing settings of the chain
        metadata_resolver: ERC20 metadata lookups for newly seen tokens
        fee_growth_backfill: Optional historical fee growth source
    """
    settings: ChainSettings
    metadata_resolver: TokenMetadataResolver
    fee_growth_backfill: Optional[FeeGrowthBackfill] = None

    @property
    def chain_id(self) -> int:
        return self.settings.chain_id

    @property
    def factory_id(self) -> str:
        return get_id(self.settings.factory_address, self.settings.chain_id)

    @property
    def bundle_id(self) -> str:
        return bundle_id(self.settings.chain_id)


class BaseEventProcessor(ABC):
    """
    Abstract base class for event processors.

    Subclasses handle one event type each and share the lookups and pricing
    steps defined here.
    """

    EVENT_NAME: str = ""

    def __init__(self, runtime: ChainRuntime):
        """
        Initialize processor.

        Args:
            runtime: Settings and collaborators of the chain being processed
        """
        self.runtime = runtime
        self.settings = runtime.settings
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def process(self, event: PoolEvent, context: EntityContext) -> ProcessorResult:
        """
        Apply one event to the ledger.

        Args:
            event: Decoded event of this processor's type
            context: Unit of work for the event

        Returns:
            ProcessorResult; a failed result means staged writes must be discarded
        """
        pass

    def _missing(self, what: str, event: PoolEvent) -> ProcessorResult:
        """Result for an event whose prerequisite entity does not exist."""
        error = (
            f"{event.NAME}: {what} not found "
            f"(chain {event.chain_id}, block {event.block_number}, log {event.log_index})"
        )
        self.logger.error(error)
        return ProcessorResult(success=False, error=error)

    def _skipped(self, reason: str, event: PoolEvent) -> ProcessorResult:
        self.logger.debug(f"Skipping {event.NAME} at block {event.block_number}: {reason}")
        return ProcessorResult(success=True, skipped=True, metadata={"reason": reason})

    async def _load_bundle(self, context: EntityContext) -> Optional[Bundle]:
        return await context.get(Bundle, self.runtime.bundle_id)

    async def _load_factory(self, context: EntityContext) -> Optional[Factory]:
        return await context.get(Factory, self.runtime.factory_id)

    async def _load_pool(self, context: EntityContext, event: PoolEvent) -> Optional[Pool]:
        return await context.get(Pool, get_id(event.src_address, event.chain_id))

    async def _load_tokens(self, context: EntityContext, pool: Pool) -> Tuple[Optional[Token], Optional[Token]]:
        token0 = await context.get(Token, pool.token0_id)
        token1 = await context.get(Token, pool.token1_id)
        return token0, token1

    async def _native_price_in_usd(self, context: EntityContext) -> Decimal:
        """Native USD price from the reference pool as currently staged."""
        reference_pool = await context.get(
            Pool,
            get_id(self.settings.stablecoin_wrapped_native_pool_address, self.settings.chain_id),
        )
        return get_native_price_in_usd(self.settings.stablecoin_is_token0, reference_pool)

    async def _native_per_token(self, token: Token, bundle: Bundle, context: EntityContext) -> Decimal:
        return await find_native_per_token(
            token,
            self.settings.wrapped_native_address,
            self.settings.stablecoin_addresses,
            self.settings.minimum_native_locked,
            bundle,
            context,
        )

    async def _refresh_derived_prices(
        self, token0: Token, token1: Token, bundle: Bundle, context: EntityContext
    ) -> None:
        """Reprice both tokens; both prices are computed before either is assigned."""
        derived0 = await self._native_per_token(token0, bundle, context)
        derived1 = await self._native_per_token(token1, bundle, context)
        token0.derived_eth = derived0
        token1.derived_eth = derived1

    async def _backfill_fee_growth(
        self, context: EntityContext, pool: Pool, event: PoolEvent
    ) -> Tuple[Optional[int], Optional[int]]:
        """
        Fetch fee growth accumulators when the event opens a new hour bucket.

        The fetched values are stored on the pool and returned for the
        buckets. Without a configured backfill this is a no-op.
        """
        if self.runtime.fee_growth_backfill is None:
            return None, None
        if await load_pool_hour_data(context, pool, event.block_timestamp) is not None:
            return None, None

        fee_growth = await self.runtime.fee_growth_backfill.fetch(
            pool.address, event.chain_id, event.block_number
        )
        if fee_growth is None:
            return None, None

        pool.fee_growth_global0_x128, pool.fee_growth_global1_x128 = fee_growth
        return fee_growth

    def log_result(self, event: PoolEvent, result: ProcessorResult) -> None:
        """Log the outcome of one event."""
        where = f"{event.NAME} {event.src_address} block {event.block_number} log {event.log_index}"
        if result.skipped:
            self.logger.debug(f"Skipped {where}")
        elif result.success:
            self.logger.debug(f"Processed {where}")
        else:
            self.logger.warning(f"Failed {where}: {result.error}")
