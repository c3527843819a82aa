"""
Typed pool and factory events consumed by the processors.

Events arrive decoded from an upstream source, one ordered stream per chain
(block number, then log index). Addresses are lower-cased on construction.
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Tuple, Type


@dataclass
class PoolEvent:
    """
    Fields common to every event.

    Attributes:
        chain_id: Chain the log was emitted on
        src_address: Emitting contract (factory or pool)
        block_number: Block number of the log
        block_timestamp: Block timestamp in unix seconds
        transaction_hash: Hash of the enclosing transaction
        log_index: Position of the log in the block
        transaction_from: Sender of the enclosing transaction
    """
    NAME: ClassVar[str] = ""
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ()

    chain_id: int
    src_address: str
    block_number: int
    block_timestamp: int
    transaction_hash: str
    log_index: int
    transaction_from: str

    def __post_init__(self):
        for name in ("src_address", "transaction_from", "transaction_hash") + self.ADDRESS_FIELDS:
            setattr(self, name, getattr(self, name).lower())

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)


@dataclass
class PoolCreatedEvent(PoolEvent):
    NAME: ClassVar[str] = "PoolCreated"
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ("token0", "token1", "pool")

    token0: str
    token1: str
    fee: int
    tick_spacing: int
    pool: str


@dataclass
class InitializeEvent(PoolEvent):
    NAME: ClassVar[str] = "Initialize"

    sqrt_price_x96: int
    tick: int


@dataclass
class MintEvent(PoolEvent):
    NAME: ClassVar[str] = "Mint"
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ("sender", "owner")

    sender: str
    owner: str
    tick_lower: int
    tick_upper: int
    amount: int
    amount0: int
    amount1: int


@dataclass
class BurnEvent(PoolEvent):
    NAME: ClassVar[str] = "Burn"
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ("owner",)

    owner: str
    tick_lower: int
    tick_upper: int
    amount: int
    amount0: int
    amount1: int


@dataclass
class SwapEvent(PoolEvent):
    NAME: ClassVar[str] = "Swap"
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ("sender", "recipient")

    sender: str
    recipient: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int


@dataclass
class CollectEvent(PoolEvent):
    NAME: ClassVar[str] = "Collect"
    ADDRESS_FIELDS: ClassVar[Tuple[str, ...]] = ("owner", "recipient")

    owner: str
    recipient: str
    tick_lower: int
    tick_upper: int
    amount0: int
    amount1: int


EVENT_TYPES: Dict[str, Type[PoolEvent]] = {
    cls.NAME: cls
    for cls in (PoolCreatedEvent, InitializeEvent, MintEvent, BurnEvent, SwapEvent, CollectEvent)
}


def event_from_dict(data: Dict[str, Any]) -> PoolEvent:
    """
    Build a typed event from a decoded log dict.

    The dict carries the event name under "event" and the remaining keys
    match the event's field names. Integer parameters may be given as
    decimal strings.

    Raises:
        ValueError: If the event name is unknown or fields are missing
    """
    name = data.get("event")
    cls = EVENT_TYPES.get(name)
    if cls is None:
        raise ValueError(f"Unknown event type: {name}")

    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            raise ValueError(f"{name} event is missing field '{f.name}'")
        value = data[f.name]
        if f.type is int or f.type == "int":
            value = int(value)
        kwargs[f.name] = value
    return cls(**kwargs)
