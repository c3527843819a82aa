"""
On-chain metadata collaborators: token metadata and fee growth backfill.
"""

from .fee_growth import FeeGrowthBackfill, Web3FeeGrowthBackfill
from .token_metadata import MetadataError, TokenMetadata, TokenMetadataResolver

__all__ = [
    "FeeGrowthBackfill",
    "Web3FeeGrowthBackfill",
    "MetadataError",
    "TokenMetadata",
    "TokenMetadataResolver",
]
