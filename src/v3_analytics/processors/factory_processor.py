"""
PoolCreated processor: registers pools and their tokens.
"""

from typing import Optional

from v3_analytics.core.storage.context import EntityContext
from v3_analytics.ledger.entity_types import Bundle, Factory, Pool, Token
from v3_analytics.utils.ids import bundle_id, get_id
from .base import BaseEventProcessor, ProcessorResult
from .events import PoolCreatedEvent


class PoolCreatedProcessor(BaseEventProcessor):
    """
    Creates the Pool record, the Factory and Bundle on first sight, and any
    Token not seen before.

    Tokens whose decimals cannot be resolved abort the event. A pool pairing
    a whitelisted token is appended to the other token's whitelist_pools so
    the oracle can price that token through it.
    """

    EVENT_NAME = PoolCreatedEvent.NAME

    async def process(self, event: PoolCreatedEvent, context: EntityContext) -> ProcessorResult:
        if event.pool in self.settings.pools_to_skip:
            return self._skipped(f"pool {event.pool} is on the skip list", event)

        chain_id = event.chain_id
        factory_id = get_id(event.src_address, chain_id)

        factory = await context.get(Factory, factory_id)
        if factory is None:
            self.logger.info(f"Creating factory {event.src_address} on chain {chain_id}")
            factory = Factory(id=factory_id, chain_id=chain_id, address=event.src_address)
            context.set(Bundle(id=bundle_id(chain_id), chain_id=chain_id))

        factory.pool_count += 1

        pool = Pool(
            id=get_id(event.pool, chain_id),
            address=event.pool,
            chain_id=chain_id,
            token0_id=get_id(event.token0, chain_id),
            token1_id=get_id(event.token1, chain_id),
            fee_tier=event.fee,
            created_at_timestamp=event.block_timestamp,
            created_at_block_number=event.block_number,
        )

        token0 = await self._load_or_create_token(context, event.token0, chain_id)
        if token0 is None:
            return ProcessorResult(
                success=False, error=f"Could not resolve decimals for token0 {event.token0}"
            )
        token1 = await self._load_or_create_token(context, event.token1, chain_id)
        if token1 is None:
            return ProcessorResult(
                success=False, error=f"Could not resolve decimals for token1 {event.token1}"
            )

        if self.settings.is_whitelisted(token0.address):
            token1.whitelist_pools.append(pool.id)
        if self.settings.is_whitelisted(token1.address):
            token0.whitelist_pools.append(pool.id)

        context.set(pool)
        context.set(token0)
        context.set(token1)
        context.set(factory)

        self.logger.debug(
            f"Registered pool {event.pool} ({token0.symbol}/{token1.symbol}, fee {event.fee})"
        )
        return ProcessorResult(success=True, metadata={"pool_id": pool.id})

    async def _load_or_create_token(
        self, context: EntityContext, address: str, chain_id: int
    ) -> Optional[Token]:
        """Existing token, a new one built from resolved metadata, or None without decimals."""
        token = await context.get(Token, get_id(address, chain_id))
        if token is not None:
            return token

        metadata = await self.runtime.metadata_resolver.resolve(address)
        if not metadata.has_decimals:
            self.logger.debug(f"No decimals for token {address} on chain {chain_id}")
            return None

        return Token(
            id=get_id(address, chain_id),
            address=metadata.address,
            chain_id=chain_id,
            symbol=metadata.symbol,
            name=metadata.name,
            decimals=metadata.decimals,
            total_supply=metadata.total_supply,
        )
