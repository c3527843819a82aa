"""
Pricing and state aggregation engine for concentrated-liquidity pool events.
"""

__version__ = "0.1.0"
