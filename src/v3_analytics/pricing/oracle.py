"""
Native asset price oracle.

Derives a token's price in units of the chain's wrapped native asset by
walking the token's whitelisted pools, and the native asset's USD price from
the chain's stablecoin/wrapped-native reference pool.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from v3_analytics.ledger.entity_types import Bundle, Pool, Token
from .v3_math import ONE_BD, ZERO_BD, safe_div

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativePriceQuote:
    """
    Token price snapshot from the best qualifying whitelisted pool.

    Attributes:
        token_address: Token being priced
        price_in_native: Price in units of the wrapped native asset
        counter_token: Address of the whitelisted token used for pricing
        pool_address: Pool used to determine the price
        native_liquidity: Native-asset value locked on the counter-token side
    """

    token_address: str
    price_in_native: Decimal
    counter_token: str
    pool_address: str
    native_liquidity: Decimal


async def find_native_price_quote(
    token: Token,
    minimum_native_locked: Decimal,
    context,
) -> Optional[NativePriceQuote]:
    """
    Select the whitelisted pool with the most native liquidity on the
    counter-token side and price the token through it.

    Candidates below minimum_native_locked are ignored. On equal liquidity the
    pool listed first in token.whitelist_pools wins.

    Args:
        token: Token to price
        minimum_native_locked: Threshold on the counter side's native value
        context: EntityContext used to load pools and counter tokens

    Returns:
        Best quote, or None when no candidate qualifies (price unknown)
    """
    largest_liquidity_eth = ZERO_BD
    best: Optional[NativePriceQuote] = None

    for pool_id in token.whitelist_pools:
        pool = await context.get(Pool, pool_id)
        if pool is None:
            continue

        if pool.token0_id == token.id:
            counter = await context.get(Token, pool.token1_id)
            if counter is None:
                continue
            eth_locked = pool.total_value_locked_token1 * counter.derived_eth
            price = pool.token0_price * counter.derived_eth
        elif pool.token1_id == token.id:
            counter = await context.get(Token, pool.token0_id)
            if counter is None:
                continue
            eth_locked = pool.total_value_locked_token0 * counter.derived_eth
            price = pool.token1_price * counter.derived_eth
        else:
            logger.warning(f"Pool {pool.id} listed for {token.id} does not contain it")
            continue

        if eth_locked < minimum_native_locked:
            continue
        if best is not None and eth_locked <= largest_liquidity_eth:
            continue

        largest_liquidity_eth = eth_locked
        best = NativePriceQuote(
            token_address=token.address,
            price_in_native=price,
            counter_token=counter.address,
            pool_address=pool.address,
            native_liquidity=eth_locked,
        )

    return best


async def find_native_per_token(
    token: Token,
    wrapped_native_address: str,
    stablecoin_addresses: List[str],
    minimum_native_locked: Decimal,
    bundle: Bundle,
    context,
) -> Decimal:
    """
    Derive a token's price in native units.

    Returns:
        1 for the wrapped native token, 1 / native USD price for stablecoins,
        the best whitelisted pool quote otherwise, or zero when unknown
    """
    if token.address == wrapped_native_address:
        return ONE_BD
    if token.address in stablecoin_addresses:
        return safe_div(ONE_BD, bundle.eth_price_usd)

    quote = await find_native_price_quote(token, minimum_native_locked, context)
    if quote is None:
        logger.debug(f"No qualifying whitelisted pool for {token.id}")
        return ZERO_BD
    return quote.price_in_native


def get_native_price_in_usd(stablecoin_is_token0: bool, reference_pool: Optional[Pool]) -> Decimal:
    """
    Native asset USD price from the stablecoin/wrapped-native reference pool.

    Always expressed as stablecoin units per native unit; zero when the
    reference pool has not been indexed yet.
    """
    if reference_pool is None:
        return ZERO_BD
    if stablecoin_is_token0:
        return reference_pool.token1_price
    return reference_pool.token0_price


def get_tracked_amount_usd(
    token_amount0: Decimal,
    token0: Token,
    token_amount1: Decimal,
    token1: Token,
    whitelist_tokens: List[str],
    bundle: Bundle,
) -> Decimal:
    """
    USD value of an amount pair counting only whitelisted sides.

    Both sides whitelisted: the average of the two legs, since one economic
    transfer shows up as two token legs. One side whitelisted: that side's
    value. Neither: zero.
    """
    price0_usd = token0.derived_eth * bundle.eth_price_usd
    price1_usd = token1.derived_eth * bundle.eth_price_usd

    token0_tracked = token0.address in whitelist_tokens
    token1_tracked = token1.address in whitelist_tokens

    if token0_tracked and token1_tracked:
        return (token_amount0 * price0_usd + token_amount1 * price1_usd) / Decimal("2")
    if token0_tracked:
        return token_amount0 * price0_usd
    if token1_tracked:
        return token_amount1 * price1_usd
    return ZERO_BD
