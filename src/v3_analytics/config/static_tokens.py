"""
Static token metadata used in place of on-chain lookups.

Some tokens return malformed or non-standard values from their ERC20 getters
(bytes32 symbols, missing decimals, self-destructed contracts). The tables
below pin their metadata per chain.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class StaticTokenDefinition:
    """Pinned metadata for a single token."""
    address: str
    symbol: str
    name: str
    decimals: int
    total_supply: Optional[int] = None


def get_static_definition(
    token_address: str, definitions: List[StaticTokenDefinition]
) -> Optional[StaticTokenDefinition]:
    """Find the definition for an address, comparing case-insensitively."""
    target = token_address.lower()
    for definition in definitions:
        if definition.address.lower() == target:
            return definition
    return None


STATIC_TOKEN_DEFINITIONS_ETH: List[StaticTokenDefinition] = [
    StaticTokenDefinition("0xe0b7927c4af23765cb51314a0e0521a9645f0e2a", "DGD", "DGD", 9),
    StaticTokenDefinition("0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9", "AAVE", "Aave Token", 18),
    StaticTokenDefinition("0xeb9951021698b42e4399f9cbb6267aa35f82d59d", "LIF", "Lif", 18),
    StaticTokenDefinition("0xbdeb4b83251fb146687fa19d1c660f99411eefe3", "SVD", "savedroid", 18),
    StaticTokenDefinition("0xbb9bc244d798123fde783fcc1c72d3bb8c189413", "TheDAO", "TheDAO", 16),
    StaticTokenDefinition("0x38c6a68304cdefb9bec48bbfaaba5c5b47818bb2", "HPB", "HPBCoin", 18),
]

STATIC_TOKEN_DEFINITIONS_BASE: List[StaticTokenDefinition] = [
    StaticTokenDefinition(
        "0x4200000000000000000000000000000000000006", "WETH", "Wrapped Ether", 18,
        137477588920311585079766,
    ),
    StaticTokenDefinition(
        "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913", "USDC", "USD Coin", 6,
        3015012428880788,
    ),
    StaticTokenDefinition(
        "0xe2dca969624795985f2f083bcd0b674337ba130a", "SKR", "Saakuru", 18,
        9365513976423388717148962,
    ),
    StaticTokenDefinition(
        "0x3b9728bd65ca2c11a817ce39a6e91808cceef6fd", "IHF", "IHF Smart Debase Token", 18,
        516033706388471453082003,
    ),
    StaticTokenDefinition(
        "0x6d3b8c76c5396642960243febf736c6be8b60562", "SKOP", "SKOP Token", 18,
        150000000000000000000000000,
    ),
    StaticTokenDefinition(
        "0x236aa50979d5f3de3bd1eeb40e81137f22ab794b", "tBTC", "Base tBTC v2", 18,
        37474596000000000000,
    ),
]

STATIC_TOKEN_DEFINITIONS: Dict[int, List[StaticTokenDefinition]] = {
    1: STATIC_TOKEN_DEFINITIONS_ETH,
    8453: STATIC_TOKEN_DEFINITIONS_BASE,
}
