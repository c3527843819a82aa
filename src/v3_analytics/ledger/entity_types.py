"""
Entity types for the analytics ledger.

Each entity is a plain dataclass mutated in place by the processors and
persisted through an EntityStoreInterface. Every entity carries its chain id
and a chain-scoped id (see v3_analytics.utils.ids).

Monetary quantities are Decimals, raw on-chain quantities (liquidity,
sqrt prices, fee growth accumulators) are Python ints.
"""

import dataclasses
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Optional, Type, Union, get_type_hints

ZERO_BD = Decimal("0")
ADDRESS_ZERO = "0x0000000000000000000000000000000000000000"

# ujson only handles 64-bit integers natively
_MAX_NATIVE_INT = 2**63


@dataclass
class Factory:
    """Protocol-wide aggregates for one chain."""
    KIND: ClassVar[str] = "Factory"

    id: str
    chain_id: int
    address: str
    pool_count: int = 0
    tx_count: int = 0
    total_volume_eth: Decimal = ZERO_BD
    total_volume_usd: Decimal = ZERO_BD
    untracked_volume_usd: Decimal = ZERO_BD
    total_fees_usd: Decimal = ZERO_BD
    total_fees_eth: Decimal = ZERO_BD
    total_value_locked_eth: Decimal = ZERO_BD
    total_value_locked_usd: Decimal = ZERO_BD
    owner: str = ADDRESS_ZERO


@dataclass
class Bundle:
    """Native asset USD price for one chain."""
    KIND: ClassVar[str] = "Bundle"

    id: str
    chain_id: int
    eth_price_usd: Decimal = ZERO_BD


@dataclass
class Token:
    """
    ERC20 token aggregates.

    whitelist_pools is the append-only list of pool ids pairing this token
    with a whitelisted token; the price oracle walks it to derive derived_eth.
    """
    KIND: ClassVar[str] = "Token"

    id: str
    address: str
    chain_id: int
    symbol: str
    name: str
    decimals: int
    total_supply: int = 0
    derived_eth: Decimal = ZERO_BD
    volume: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    untracked_volume_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    total_value_locked: Decimal = ZERO_BD
    total_value_locked_usd: Decimal = ZERO_BD
    tx_count: int = 0
    whitelist_pools: List[str] = field(default_factory=list)


@dataclass
class Pool:
    """
    Pool state and aggregates.

    tick stays None until the pool's Initialize event; fee growth
    accumulators stay None unless a backfill collaborator provides them.
    """
    KIND: ClassVar[str] = "Pool"

    id: str
    address: str
    chain_id: int
    token0_id: str
    token1_id: str
    fee_tier: int
    created_at_timestamp: int
    created_at_block_number: int
    tx_count: int = 0
    liquidity: int = 0
    sqrt_price: int = 0
    token0_price: Decimal = ZERO_BD
    token1_price: Decimal = ZERO_BD
    tick: Optional[int] = None
    total_value_locked_token0: Decimal = ZERO_BD
    total_value_locked_token1: Decimal = ZERO_BD
    total_value_locked_eth: Decimal = ZERO_BD
    total_value_locked_usd: Decimal = ZERO_BD
    volume_token0: Decimal = ZERO_BD
    volume_token1: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    untracked_volume_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    fee_growth_global0_x128: Optional[int] = None
    fee_growth_global1_x128: Optional[int] = None
    collected_fees_token0: Decimal = ZERO_BD
    collected_fees_token1: Decimal = ZERO_BD
    collected_fees_usd: Decimal = ZERO_BD


@dataclass
class Tick:
    """Liquidity counters at one initialized tick of a pool."""
    KIND: ClassVar[str] = "Tick"

    id: str
    chain_id: int
    pool_id: str
    pool_address: str
    tick_idx: int
    created_at_timestamp: int
    created_at_block_number: int
    liquidity_gross: int = 0
    liquidity_net: int = 0
    price0: Decimal = ZERO_BD
    price1: Decimal = ZERO_BD


@dataclass
class Transaction:
    KIND: ClassVar[str] = "Transaction"

    id: str
    chain_id: int
    transaction_hash: str
    block_number: int
    timestamp: int
    gas_used: int = 0
    gas_price: int = 0


@dataclass
class Swap:
    KIND: ClassVar[str] = "Swap"

    id: str
    chain_id: int
    transaction_id: str
    timestamp: int
    pool_id: str
    token0_id: str
    token1_id: str
    sender: str
    recipient: str
    origin: str
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    sqrt_price_x96: int
    tick: int
    log_index: int


@dataclass
class Mint:
    KIND: ClassVar[str] = "Mint"

    id: str
    chain_id: int
    transaction_id: str
    timestamp: int
    pool_id: str
    token0_id: str
    token1_id: str
    owner: str
    sender: str
    origin: str
    amount: int
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    tick_lower: int
    tick_upper: int
    log_index: int


@dataclass
class Burn:
    KIND: ClassVar[str] = "Burn"

    id: str
    chain_id: int
    transaction_id: str
    timestamp: int
    pool_id: str
    token0_id: str
    token1_id: str
    owner: str
    origin: str
    amount: int
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    tick_lower: int
    tick_upper: int
    log_index: int


@dataclass
class Collect:
    KIND: ClassVar[str] = "Collect"

    id: str
    chain_id: int
    transaction_id: str
    timestamp: int
    pool_id: str
    owner: str
    amount0: Decimal
    amount1: Decimal
    amount_usd: Decimal
    tick_lower: int
    tick_upper: int
    log_index: int


@dataclass
class UniswapDayData:
    """Protocol-wide daily rollup; tracks stock values from the Factory."""
    KIND: ClassVar[str] = "UniswapDayData"

    id: str
    chain_id: int
    date: int
    volume_eth: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    volume_usd_untracked: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    tx_count: int = 0
    tvl_usd: Decimal = ZERO_BD


@dataclass
class PoolDayData:
    KIND: ClassVar[str] = "PoolDayData"

    id: str
    chain_id: int
    date: int
    pool_id: str
    liquidity: int = 0
    sqrt_price: int = 0
    token0_price: Decimal = ZERO_BD
    token1_price: Decimal = ZERO_BD
    tick: Optional[int] = None
    fee_growth_global0_x128: int = 0
    fee_growth_global1_x128: int = 0
    tvl_usd: Decimal = ZERO_BD
    volume_token0: Decimal = ZERO_BD
    volume_token1: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    tx_count: int = 0
    open_price: Decimal = ZERO_BD
    high: Decimal = ZERO_BD
    low: Decimal = ZERO_BD
    close: Decimal = ZERO_BD


@dataclass
class PoolHourData:
    KIND: ClassVar[str] = "PoolHourData"

    id: str
    chain_id: int
    period_start_unix: int
    pool_id: str
    liquidity: int = 0
    sqrt_price: int = 0
    token0_price: Decimal = ZERO_BD
    token1_price: Decimal = ZERO_BD
    tick: Optional[int] = None
    fee_growth_global0_x128: int = 0
    fee_growth_global1_x128: int = 0
    tvl_usd: Decimal = ZERO_BD
    volume_token0: Decimal = ZERO_BD
    volume_token1: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    tx_count: int = 0
    open_price: Decimal = ZERO_BD
    high: Decimal = ZERO_BD
    low: Decimal = ZERO_BD
    close: Decimal = ZERO_BD


@dataclass
class TokenDayData:
    KIND: ClassVar[str] = "TokenDayData"

    id: str
    chain_id: int
    date: int
    token_id: str
    volume: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    untracked_volume_usd: Decimal = ZERO_BD
    total_value_locked: Decimal = ZERO_BD
    total_value_locked_usd: Decimal = ZERO_BD
    price_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    tx_count: int = 0
    open_price: Decimal = ZERO_BD
    high: Decimal = ZERO_BD
    low: Decimal = ZERO_BD
    close: Decimal = ZERO_BD


@dataclass
class TokenHourData:
    KIND: ClassVar[str] = "TokenHourData"

    id: str
    chain_id: int
    period_start_unix: int
    token_id: str
    volume: Decimal = ZERO_BD
    volume_usd: Decimal = ZERO_BD
    untracked_volume_usd: Decimal = ZERO_BD
    total_value_locked: Decimal = ZERO_BD
    total_value_locked_usd: Decimal = ZERO_BD
    price_usd: Decimal = ZERO_BD
    fees_usd: Decimal = ZERO_BD
    tx_count: int = 0
    open_price: Decimal = ZERO_BD
    high: Decimal = ZERO_BD
    low: Decimal = ZERO_BD
    close: Decimal = ZERO_BD


Entity = Union[
    Factory, Bundle, Token, Pool, Tick, Transaction, Swap, Mint, Burn, Collect,
    UniswapDayData, PoolDayData, PoolHourData, TokenDayData, TokenHourData,
]

ENTITY_TYPES: Dict[str, Type] = {
    cls.KIND: cls
    for cls in (
        Factory, Bundle, Token, Pool, Tick, Transaction, Swap, Mint, Burn, Collect,
        UniswapDayData, PoolDayData, PoolHourData, TokenDayData, TokenHourData,
    )
}


def _encode_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) >= _MAX_NATIVE_INT:
        return str(value)
    if isinstance(value, list):
        return list(value)
    return value


def _decode_value(value: Any, field_type: Any) -> Any:
    if value is None:
        return None
    # Optional[X] -> X
    if getattr(field_type, "__origin__", None) is Union:
        field_type = next(arg for arg in field_type.__args__ if arg is not type(None))
    if field_type is Decimal:
        return Decimal(str(value))
    if field_type is int:
        return int(value)
    if getattr(field_type, "__origin__", None) is list:
        return list(value)
    return value


def entity_to_dict(entity: Any) -> Dict[str, Any]:
    """
    Serialize an entity to a JSON-compatible dict.

    Decimals and integers wider than 64 bits are rendered as strings. The
    entity kind is stored under "__kind__".
    """
    data = {f.name: _encode_value(getattr(entity, f.name)) for f in dataclasses.fields(entity)}
    data["__kind__"] = entity.KIND
    return data


def entity_from_dict(data: Dict[str, Any], kind: Optional[str] = None) -> Any:
    """
    Rebuild an entity from entity_to_dict output.

    Raises:
        KeyError: If the kind is unknown
    """
    kind = kind or data["__kind__"]
    cls = ENTITY_TYPES[kind]
    hints = get_type_hints(cls)
    kwargs = {
        f.name: _decode_value(data[f.name], hints[f.name])
        for f in dataclasses.fields(cls)
        if f.name in data
    }
    return cls(**kwargs)
