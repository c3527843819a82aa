"""
Event processors for the v3 analytics engine.

Usage:
    from v3_analytics.processors import ChainRuntime, EventPipeline

    pipeline = EventPipeline(store, runtime)
    stats = await pipeline.process_events(events)
"""

from .base import BaseEventProcessor, ChainRuntime, ProcessorError, ProcessorResult
from .events import (
    BurnEvent,
    CollectEvent,
    EVENT_TYPES,
    InitializeEvent,
    MintEvent,
    PoolCreatedEvent,
    PoolEvent,
    SwapEvent,
    event_from_dict,
)
from .factory_processor import PoolCreatedProcessor
from .liquidity_processor import BurnProcessor, CollectProcessor, MintProcessor
from .pipeline import EventPipeline
from .swap_processor import InitializeProcessor, SwapProcessor

__all__ = [
    "BaseEventProcessor",
    "ChainRuntime",
    "ProcessorError",
    "ProcessorResult",
    "PoolEvent",
    "PoolCreatedEvent",
    "InitializeEvent",
    "MintEvent",
    "BurnEvent",
    "SwapEvent",
    "CollectEvent",
    "EVENT_TYPES",
    "event_from_dict",
    "PoolCreatedProcessor",
    "InitializeProcessor",
    "MintProcessor",
    "BurnProcessor",
    "SwapProcessor",
    "CollectProcessor",
    "EventPipeline",
]
