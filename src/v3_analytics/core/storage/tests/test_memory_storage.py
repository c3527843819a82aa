"""
Tests for the in-memory and JSON snapshot entity stores.
"""

from decimal import Decimal

import pytest

from v3_analytics.ledger.entity_types import Bundle, Token
from ..base import DataError
from ..json_storage import JsonEntityStore
from ..memory import InMemoryEntityStore


def make_token(address="0xa", decimals=18):
    return Token(id=f"{address}-1", address=address, chain_id=1, symbol="A", name="A", decimals=decimals)


class TestInMemoryEntityStore:

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self):
        store = InMemoryEntityStore()
        assert await store.get("Token", "0xa-1") is None

    @pytest.mark.asyncio
    async def test_returns_detached_copies(self):
        store = InMemoryEntityStore()
        token = make_token()
        await store.set(token)

        token.tx_count = 5
        loaded = await store.get("Token", "0xa-1")
        loaded.symbol = "CHANGED"

        assert loaded.tx_count == 0
        assert (await store.get("Token", "0xa-1")).symbol == "A"

    @pytest.mark.asyncio
    async def test_count_and_iterate_by_kind(self):
        store = InMemoryEntityStore()
        await store.set(make_token("0xa"))
        await store.set(make_token("0xb"))
        await store.set(Bundle(id="1", chain_id=1))

        assert store.count() == 3
        assert store.count("Token") == 2
        assert sorted(t.address for t in store.iter_entities("Token")) == ["0xa", "0xb"]

    @pytest.mark.asyncio
    async def test_context_manager_connects(self):
        async with InMemoryEntityStore() as store:
            assert store.is_connected
            assert await store.health_check()
        assert not store.is_connected


class TestJsonEntityStore:

    @pytest.mark.asyncio
    async def test_snapshot_survives_restart(self, tmp_path):
        async with JsonEntityStore({"base_path": str(tmp_path)}) as store:
            await store.set(make_token())
            await store.set(Bundle(id="1", chain_id=1, eth_price_usd=Decimal("1234.5")))

        assert (tmp_path / "entities.json").exists()

        async with JsonEntityStore({"base_path": str(tmp_path)}) as reopened:
            assert reopened.count() == 2
            bundle = await reopened.get("Bundle", "1")
            assert bundle.eth_price_usd == Decimal("1234.5")

    @pytest.mark.asyncio
    async def test_compressed_snapshot(self, tmp_path):
        config = {"base_path": str(tmp_path), "filename": "state.json", "compress": True}
        async with JsonEntityStore(config) as store:
            await store.set(make_token(decimals=0))

        assert (tmp_path / "state.json.gz").exists()

        store = JsonEntityStore(config)
        assert store.load() == 1
        assert (await store.get("Token", "0xa-1")).decimals == 0

    def test_load_without_snapshot(self, tmp_path):
        assert JsonEntityStore({"base_path": str(tmp_path)}).load() == 0

    def test_corrupt_snapshot_raises(self, tmp_path):
        (tmp_path / "entities.json").write_text("{not json")

        with pytest.raises(DataError):
            JsonEntityStore({"base_path": str(tmp_path)}).load()
