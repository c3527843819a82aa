"""
Chain-scoped entity identifiers.

Every per-chain entity is keyed by its natural key plus the chain id so that
several deployments can share one entity store without collisions.
"""

from typing import Tuple


def normalize_address(address: str) -> str:
    """Lower-case an address for use as a key."""
    return address.lower()


def get_id(address: str, chain_id: int) -> str:
    """Id for Pool, Token, Factory and Transaction entities."""
    return f"{normalize_address(address)}-{chain_id}"


def split_id(entity_id: str) -> Tuple[str, int]:
    """
    Split a chain-scoped id back into its natural key and chain id.

    Raises:
        ValueError: If the id carries no chain suffix
    """
    key, sep, chain = entity_id.rpartition("-")
    if not sep or not chain.isdigit():
        raise ValueError(f"Not a chain-scoped id: {entity_id}")
    return key, int(chain)


def bundle_id(chain_id: int) -> str:
    return str(chain_id)


def tick_id(pool_address: str, tick_idx: int, chain_id: int) -> str:
    return f"{normalize_address(pool_address)}#{tick_idx}-{chain_id}"


def event_record_id(transaction_id: str, log_index: int) -> str:
    """Id for Swap/Mint/Burn/Collect records; the transaction id already carries the chain."""
    return f"{transaction_id}-{log_index}"


def bucket_id(address: str, bucket_index: int, chain_id: int) -> str:
    """Id for pool and token hour/day buckets."""
    return f"{normalize_address(address)}-{bucket_index}-{chain_id}"


def protocol_day_id(day_id: int, chain_id: int) -> str:
    return f"{day_id}-{chain_id}"
