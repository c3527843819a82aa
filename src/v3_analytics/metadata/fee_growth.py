"""
Optional historical fee growth lookups.

When a pool event opens a new hour bucket, the processors may ask a
FeeGrowthBackfill for the pool's feeGrowthGlobal0X128/feeGrowthGlobal1X128
as of the event's block. The lookup is best-effort: any failure yields None
and the event is processed without it.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from eth_utils.address import to_checksum_address
from web3 import Web3

logger = logging.getLogger(__name__)

POOL_FEE_GROWTH_ABI = [
    {"inputs": [], "name": "feeGrowthGlobal0X128", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "feeGrowthGlobal1X128", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]


class FeeGrowthBackfill(ABC):
    """Source of historical fee growth accumulators."""

    @abstractmethod
    async def fetch(self, pool_address: str, chain_id: int, block_number: int) -> Optional[Tuple[int, int]]:
        """
        Fetch both fee growth accumulators at a block.

        Returns:
            (fee_growth_global0_x128, fee_growth_global1_x128) or None
        """
        pass


class Web3FeeGrowthBackfill(FeeGrowthBackfill):
    """
    Reads the accumulators with two eth_call requests pinned to the block.

    Requires an archive node for historical blocks.
    """

    def __init__(self, web3: Web3):
        self.web3 = web3
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def fetch(self, pool_address: str, chain_id: int, block_number: int) -> Optional[Tuple[int, int]]:
        contract = self.web3.eth.contract(
            address=to_checksum_address(pool_address), abi=POOL_FEE_GROWTH_ABI
        )
        loop = asyncio.get_running_loop()
        try:
            fee_growth0, fee_growth1 = await asyncio.gather(
                loop.run_in_executor(
                    None,
                    lambda: contract.functions.feeGrowthGlobal0X128().call(block_identifier=block_number),
                ),
                loop.run_in_executor(
                    None,
                    lambda: contract.functions.feeGrowthGlobal1X128().call(block_identifier=block_number),
                ),
            )
        except Exception as e:
            self.logger.warning(
                f"Fee growth lookup failed for {pool_address} on chain {chain_id} at block {block_number}: {e}"
            )
            return None
        return int(fee_growth0), int(fee_growth1)
