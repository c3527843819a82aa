"""
Token metadata resolution.

Static overrides win over on-chain reads. On-chain reads go through a web3
client when one is configured for the chain. Symbol and name fall back to
"UNKNOWN" and total supply to 0; decimals fall back to None, which callers
must treat as "unknown" and not as a default.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from eth_utils.address import is_address, to_checksum_address
from web3 import Web3

from v3_analytics.config.static_tokens import StaticTokenDefinition, get_static_definition

logger = logging.getLogger(__name__)

UNKNOWN = "UNKNOWN"

ERC20_ABI = [
    {"constant": True, "inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
    {"constant": True, "inputs": [], "name": "totalSupply", "outputs": [{"name": "", "type": "uint256"}],
     "stateMutability": "view", "type": "function"},
]


class MetadataError(Exception):
    """Raised when token metadata cannot be read from chain."""
    pass


@dataclass
class TokenMetadata:
    """
    Resolved token metadata.

    Attributes:
        address: Lower-cased token address
        symbol: Token symbol or "UNKNOWN"
        name: Token name or "UNKNOWN"
        decimals: Token decimals, None when unresolvable
        total_supply: Raw total supply, 0 when unresolvable
    """

    address: str
    symbol: str
    name: str
    decimals: Optional[int]
    total_supply: int = 0

    @property
    def has_decimals(self) -> bool:
        return self.decimals is not None


class TokenMetadataResolver:
    """
    Resolve ERC20 metadata for one chain.

    Args:
        token_overrides: Static definitions checked before any RPC call
        web3: Optional web3 client; without it only overrides resolve
    """

    def __init__(self, token_overrides: List[StaticTokenDefinition], web3: Optional[Web3] = None):
        self.token_overrides = token_overrides
        self.web3 = web3
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    async def resolve(self, address: str) -> TokenMetadata:
        address = address.lower()
        static = get_static_definition(address, self.token_overrides)

        if static is not None:
            symbol = static.symbol
            name = static.name
            decimals = static.decimals
        else:
            symbol = await self._read_or_default(address, "symbol", UNKNOWN)
            name = await self._read_or_default(address, "name", UNKNOWN)
            decimals = await self._read_or_default(address, "decimals", None)

        if static is not None and static.total_supply:
            total_supply = static.total_supply
        else:
            total_supply = await self._read_or_default(address, "totalSupply", 0)

        return TokenMetadata(
            address=address,
            symbol=symbol if symbol is not None else UNKNOWN,
            name=name if name is not None else UNKNOWN,
            decimals=decimals,
            total_supply=total_supply if total_supply is not None else 0,
        )

    async def _read_or_default(self, address: str, function_name: str, default: Any) -> Any:
        if self.web3 is None or not is_address(address):
            return default
        try:
            return await self._call(address, function_name)
        except MetadataError as e:
            self.logger.debug(f"Problem getting {function_name} for {address}: {e}")
            return default

    async def _call(self, address: str, function_name: str) -> Any:
        """
        Call a zero-argument ERC20 view function.

        Raises:
            MetadataError: If the RPC call fails
        """
        contract = self.web3.eth.contract(address=to_checksum_address(address), abi=ERC20_ABI)
        call: Callable[[], Any] = getattr(contract.functions, function_name)().call
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, call)
        except Exception as e:
            raise MetadataError(f"{function_name}() failed for {address}: {e}") from e
