"""
Croc price and concentrated liquidity helpers.

Croc prices are expressed as base tokens per quote token (raw units) and
stored on-chain as sqrt(price) in Q64.64 fixed point. A tick above a range
means the position is entirely in base; below it, entirely in quote.
"""

from __future__ import annotations

import math
from decimal import Decimal, localcontext

Q64 = 2**64

# Raw uint128 quantities and Q64.64 prices need more than the default 28 digits.
DECIMAL_PREC = 80

MIN_TICK = -665454
MAX_TICK = 831818

# Bounds of the sqrt price curve (Q64.64). Used as "no price limit" sentinels.
MIN_SQRT_PRICE = 65538
MAX_SQRT_PRICE = 21267430153580247136652501917186561138 - 1


def decimal_ctx():
    """Local Decimal context for quantity and price arithmetic. Leaves the caller's context untouched."""
    return localcontext(prec=DECIMAL_PREC)


def encode_croc_price(price: float) -> int:
    if price < 0:
        raise ValueError("price must be >= 0")
    with decimal_ctx():
        return int(Decimal(str(price)).sqrt() * Q64)


def decode_croc_price(sqrt_x64: int) -> float:
    with decimal_ctx():
        sq = Decimal(int(sqrt_x64)) / Decimal(Q64)
        return float(sq * sq)


def tick_to_price(tick: int) -> float:
    return math.pow(1.0001, int(tick))


def price_to_tick(price: float) -> int:
    if price <= 0:
        raise ValueError("price must be > 0")
    return int(math.floor(math.log(price) / math.log(1.0001)))


def conc_deposit_balance(price: float, lower_price: float, upper_price: float) -> float:
    """
    Fraction (0..1), by value, of a concentrated range deposit held in base.

    Args:
        price: Current pool price (base per quote).
        lower_price: Range lower bound price.
        upper_price: Range upper bound price.
    """
    if price <= lower_price:
        return 0.0
    if price >= upper_price:
        return 1.0

    sqrt_p = math.sqrt(price)
    base_side = sqrt_p - math.sqrt(lower_price)
    # quote amount per unit liquidity, valued in base
    quote_side = (1.0 / sqrt_p - 1.0 / math.sqrt(upper_price)) * price
    return base_side / (base_side + quote_side)


def _clamp(price: float, lower_price: float, upper_price: float) -> float:
    return min(max(price, lower_price), upper_price)


def base_token_for_conc_liq(price: float, liq: int, lower_price: float, upper_price: float) -> int:
    """
    Raw base tokens held by `liq` units of liquidity in the range at `price`.
    """
    p = _clamp(price, lower_price, upper_price)
    with decimal_ctx():
        amount = Decimal(int(liq)) * (Decimal(p).sqrt() - Decimal(lower_price).sqrt())
        return int(amount)


def quote_token_for_conc_liq(price: float, liq: int, lower_price: float, upper_price: float) -> int:
    """
    Raw quote tokens held by `liq` units of liquidity in the range at `price`.
    """
    p = _clamp(price, lower_price, upper_price)
    with decimal_ctx():
        amount = Decimal(int(liq)) * (1 / Decimal(p).sqrt() - 1 / Decimal(upper_price).sqrt())
        return int(amount)


def to_display_price(price: float, base_decimals: int, quote_decimals: int, is_inverted: bool = False) -> float:
    scaled = price * math.pow(10, quote_decimals) / math.pow(10, base_decimals)
    return 1.0 / scaled if is_inverted else scaled
