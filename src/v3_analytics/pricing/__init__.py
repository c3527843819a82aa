"""
Pricing: fixed-point conversions and the native asset price oracle.
"""

from .oracle import (
    NativePriceQuote,
    find_native_per_token,
    find_native_price_quote,
    get_native_price_in_usd,
    get_tracked_amount_usd,
)
from .v3_math import (
    ONE_BD,
    Q96,
    ZERO_BD,
    convert_token_to_decimal,
    exponent_to_big_decimal,
    fast_exponentiation,
    safe_div,
    safe_div_number,
    sqrt_price_x96_to_token_prices,
)

__all__ = [
    "NativePriceQuote",
    "find_native_per_token",
    "find_native_price_quote",
    "get_native_price_in_usd",
    "get_tracked_amount_usd",
    "ONE_BD",
    "Q96",
    "ZERO_BD",
    "convert_token_to_decimal",
    "exponent_to_big_decimal",
    "fast_exponentiation",
    "safe_div",
    "safe_div_number",
    "sqrt_price_x96_to_token_prices",
]
