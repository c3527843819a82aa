"""
Analytics ledger: entity types, tick ledger, transactions and time buckets.

Only the entity types are re-exported here; import the ledger submodules
directly.
"""

from .entity_types import (
    ENTITY_TYPES,
    Bundle,
    Burn,
    Collect,
    Factory,
    Mint,
    Pool,
    PoolDayData,
    PoolHourData,
    Swap,
    Tick,
    Token,
    TokenDayData,
    TokenHourData,
    Transaction,
    UniswapDayData,
    entity_from_dict,
    entity_to_dict,
)

__all__ = [
    "ENTITY_TYPES",
    "Bundle",
    "Burn",
    "Collect",
    "Factory",
    "Mint",
    "Pool",
    "PoolDayData",
    "PoolHourData",
    "Swap",
    "Tick",
    "Token",
    "TokenDayData",
    "TokenHourData",
    "Transaction",
    "UniswapDayData",
    "entity_from_dict",
    "entity_to_dict",
]
