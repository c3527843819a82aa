"""
Tests for the transaction upsert.
"""

import pytest

from v3_analytics.core.storage.context import EntityContext
from v3_analytics.core.storage.memory import InMemoryEntityStore
from ..entity_types import Transaction
from ..transactions import load_transaction

TX_HASH = "0x" + "AB" * 32


class TestLoadTransaction:

    @pytest.mark.asyncio
    async def test_creates_transaction(self):
        store = InMemoryEntityStore()
        async with EntityContext(store) as context:
            transaction = await load_transaction(context, TX_HASH, 100, 1_700_000_000, 1)

        assert transaction.id == f"{TX_HASH.lower()}-1"
        assert transaction.gas_used == 0
        stored = await store.get(Transaction.KIND, transaction.id)
        assert stored.block_number == 100
        assert stored.timestamp == 1_700_000_000

    @pytest.mark.asyncio
    async def test_reapplying_is_idempotent(self):
        store = InMemoryEntityStore()
        for _ in range(2):
            async with EntityContext(store) as context:
                await load_transaction(context, TX_HASH, 100, 1_700_000_000, 1)

        assert store.count(Transaction.KIND) == 1
        stored = await store.get(Transaction.KIND, f"{TX_HASH.lower()}-1")
        assert stored == Transaction(
            id=f"{TX_HASH.lower()}-1", chain_id=1, transaction_hash=TX_HASH.lower(),
            block_number=100, timestamp=1_700_000_000,
        )

    @pytest.mark.asyncio
    async def test_two_events_in_one_transaction_share_record(self):
        context = EntityContext(InMemoryEntityStore())
        first = await load_transaction(context, TX_HASH, 100, 1_700_000_000, 1)
        second = await load_transaction(context, TX_HASH, 100, 1_700_000_000, 1)

        assert first is second
