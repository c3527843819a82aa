"""
Decimal and fixed-point conversions for Uniswap V3 style pools.

Key concepts:
- sqrtPriceX96: Square root of the token1/token0 price in Q96 fixed point
- Raw token amounts are integers scaled by 10**decimals
- Tick: logarithmic price representation where price = 1.0001^tick

All monetary arithmetic uses Decimal; the module raises the context precision
so that squaring a Q96 ratio and accumulating millions of amounts does not
round away significant digits.
"""

from decimal import Decimal, getcontext
from typing import Tuple

from v3_analytics.ledger.entity_types import Token

getcontext().prec = 80

# Q96 constants
Q96 = 2**96

ZERO_BD = Decimal("0")
ONE_BD = Decimal("1")


def exponent_to_big_decimal(decimals: int) -> Decimal:
    """Return 10**decimals as an exact Decimal."""
    return Decimal(10) ** decimals


def safe_div(amount0: Decimal, amount1: Decimal) -> Decimal:
    """Divide, returning zero when the denominator is zero."""
    if amount1 == ZERO_BD:
        return ZERO_BD
    return amount0 / amount1


def safe_div_number(amount0: float, amount1: float) -> float:
    if amount1 == 0:
        return 0.0
    return amount0 / amount1


def convert_token_to_decimal(token_amount: int, exchange_decimals: int) -> Decimal:
    """
    Convert a raw integer token amount to a human-scale Decimal.

    Args:
        token_amount: Raw on-chain amount (may be negative)
        exchange_decimals: Token decimals

    Returns:
        token_amount / 10**exchange_decimals
    """
    if exchange_decimals == 0:
        return Decimal(token_amount)
    return Decimal(token_amount) / exponent_to_big_decimal(exchange_decimals)


def fast_exponentiation(value: float, power: int) -> float:
    """
    Exponentiation by squaring over floats.

    Used for tick prices, which are reference values and tolerate float
    precision.
    """
    if power < 0:
        return safe_div_number(1.0, fast_exponentiation(value, -power))
    if power == 0:
        return 1.0
    if power == 1:
        return value

    half_result = fast_exponentiation(value, power // 2)
    result = half_result * half_result
    if power % 2 == 1:
        result = result * value
    return result


def sqrt_price_x96_to_token_prices(sqrt_price_x96: int, token0: Token, token1: Token) -> Tuple[Decimal, Decimal]:
    """
    Convert a Q96 square-root price into decimal-adjusted token prices.

    The ratio is squared as a Decimal rather than squaring the raw integer.

    Args:
        sqrt_price_x96: Square root of the token1/token0 price in Q96 format
        token0: First token of the pair (for decimals)
        token1: Second token of the pair (for decimals)

    Returns:
        (price0, price1) where price0 is token1 per token0 and
        price1 = 1 / price0 (zero when price0 is zero)
    """
    ratio = Decimal(sqrt_price_x96) / Decimal(Q96)
    price1_raw = ratio * ratio
    price0 = (
        price1_raw
        * exponent_to_big_decimal(token0.decimals)
        / exponent_to_big_decimal(token1.decimals)
    )
    price1 = safe_div(ONE_BD, price0)
    return price0, price1
