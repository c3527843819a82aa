"""
Utility helpers for the v3 analytics engine.
"""

from .ids import (
    bucket_id,
    bundle_id,
    event_record_id,
    get_id,
    normalize_address,
    protocol_day_id,
    split_id,
    tick_id,
)

__all__ = [
    "bucket_id",
    "bundle_id",
    "event_record_id",
    "get_id",
    "normalize_address",
    "protocol_day_id",
    "split_id",
    "tick_id",
]
