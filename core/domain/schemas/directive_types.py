"""
Long-form order directive tree.

A directive is consumed by CrocSwapDex.userCmd(LONG_PATH, bytes) and describes
one chained transaction: an opening settlement followed by hops, each hop
settling one token and running an ordered list of pool actions.

Hop and pool order is execution order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.domain.enums.directive_enums import RollType

# "Unlimited" settlement bound. Fits in the signed full-word encoding with room to spare.
DEFAULT_SETTLE_LIMIT = 2**125


@dataclass
class SettlementDirective:
    token: str
    limit_qty: int = DEFAULT_SETTLE_LIMIT
    dust_thresh: int = 0
    use_surplus: bool = False


@dataclass
class ImproveDirective:
    is_enabled: bool = False
    use_base_side: bool = False


@dataclass
class ChainingDirective:
    roll_exit: bool = False
    swap_defer: bool = False
    offset_surplus: bool = False


@dataclass
class SwapDirective:
    is_buy: bool = False
    in_base_qty: bool = False
    roll_type: RollType = RollType.LITERAL
    qty: int = 0
    limit_price: int = 0


@dataclass
class AmbientDirective:
    is_add: bool = False
    roll_type: RollType = RollType.LITERAL
    liquidity: int = 0


@dataclass
class ConcentratedDirective:
    low_tick: int
    high_tick: int
    is_rel_tick: bool = False
    is_add: bool = True
    roll_type: RollType = RollType.LITERAL
    liquidity: int = 0


@dataclass
class PassiveDirective:
    ambient: AmbientDirective = field(default_factory=AmbientDirective)
    concentrated: List[ConcentratedDirective] = field(default_factory=list)


@dataclass
class PoolDirective:
    pool_idx: int
    passive: PassiveDirective = field(default_factory=PassiveDirective)
    swap: SwapDirective = field(default_factory=SwapDirective)
    chain: ChainingDirective = field(default_factory=ChainingDirective)


@dataclass
class HopDirective:
    settlement: SettlementDirective
    improve: ImproveDirective = field(default_factory=ImproveDirective)
    pools: List[PoolDirective] = field(default_factory=list)


@dataclass
class OrderDirective:
    open: SettlementDirective
    hops: List[HopDirective] = field(default_factory=list)
