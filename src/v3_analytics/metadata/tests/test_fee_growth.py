"""
Tests for the web3 fee growth backfill.
"""

from unittest.mock import MagicMock

import pytest

from ..fee_growth import Web3FeeGrowthBackfill

POOL = "0x" + "2" * 40


@pytest.fixture
def web3():
    client = MagicMock()
    functions = client.eth.contract.return_value.functions
    functions.feeGrowthGlobal0X128.return_value.call.return_value = 111
    functions.feeGrowthGlobal1X128.return_value.call.return_value = 222
    return client


class TestWeb3FeeGrowthBackfill:

    @pytest.mark.asyncio
    async def test_reads_both_accumulators_at_block(self, web3):
        result = await Web3FeeGrowthBackfill(web3).fetch(POOL, 1, 12_345)

        assert result == (111, 222)
        functions = web3.eth.contract.return_value.functions
        functions.feeGrowthGlobal0X128.return_value.call.assert_called_once_with(block_identifier=12_345)
        functions.feeGrowthGlobal1X128.return_value.call.assert_called_once_with(block_identifier=12_345)

    @pytest.mark.asyncio
    async def test_failure_returns_none(self, web3):
        functions = web3.eth.contract.return_value.functions
        functions.feeGrowthGlobal1X128.return_value.call.side_effect = ValueError("missing trie node")

        assert await Web3FeeGrowthBackfill(web3).fetch(POOL, 1, 12_345) is None
