from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.domain.enums.directive_enums import RollType
from core.domain.schemas.directive_types import (
    ConcentratedDirective,
    HopDirective,
    OrderDirective,
    PoolDirective,
    SettlementDirective,
)
from core.services.directive_encoder import encode_directive
from core.services.exceptions import DirectiveCursorError
from core.services.price_math import MAX_TICK, MIN_TICK


@dataclass(frozen=True)
class HopHandle:
    hop_idx: int


@dataclass(frozen=True)
class PoolHandle:
    hop_idx: int
    pool_idx: int


class DirectiveBuilder:
    """
    Append-only builder for a long-form OrderDirective.

    Every append returns a handle into the tree. Calls that take an optional
    handle default to the most recently appended hop/pool, and fail fast with
    DirectiveCursorError when there is none.

    Example:
        b = DirectiveBuilder(base)
        hop = b.append_hop(quote)
        pool = b.append_pool(420, hop=hop)
        b.append_range_burn(-69090, -52980, liq, pool=pool)
        payload = b.encode()
    """

    def __init__(self, open_token: str):
        self.directive = OrderDirective(open=SettlementDirective(token=open_token))
        self._last_hop: Optional[HopHandle] = None
        self._last_pool: Optional[PoolHandle] = None

    # ---------- lookups ----------

    def hop(self, handle: HopHandle) -> HopDirective:
        try:
            return self.directive.hops[handle.hop_idx]
        except IndexError as exc:
            raise DirectiveCursorError(f"Unknown hop handle: {handle}") from exc

    def pool(self, handle: PoolHandle) -> PoolDirective:
        try:
            return self.hop(HopHandle(handle.hop_idx)).pools[handle.pool_idx]
        except IndexError as exc:
            raise DirectiveCursorError(f"Unknown pool handle: {handle}") from exc

    def _resolve_hop(self, handle: Optional[HopHandle]) -> HopHandle:
        if handle is not None:
            return handle
        if self._last_hop is None:
            raise DirectiveCursorError("append_pool called before any hop was appended")
        return self._last_hop

    def _resolve_pool(self, handle: Optional[PoolHandle]) -> PoolHandle:
        if handle is not None:
            return handle
        if self._last_pool is None:
            raise DirectiveCursorError("range action called before any pool was appended")
        return self._last_pool

    # ---------- appends ----------

    def append_hop(self, next_token: str) -> HopHandle:
        self.directive.hops.append(HopDirective(settlement=SettlementDirective(token=next_token)))
        self._last_hop = HopHandle(len(self.directive.hops) - 1)
        return self._last_hop

    def append_pool(self, pool_idx: int, hop: Optional[HopHandle] = None) -> PoolHandle:
        hop_handle = self._resolve_hop(hop)
        pools = self.hop(hop_handle).pools
        pools.append(PoolDirective(pool_idx=int(pool_idx)))
        self._last_pool = PoolHandle(hop_handle.hop_idx, len(pools) - 1)
        return self._last_pool

    def append_range_mint(
        self,
        low_tick: int,
        high_tick: int,
        liq: int,
        pool: Optional[PoolHandle] = None,
    ) -> ConcentratedDirective:
        if int(low_tick) >= int(high_tick):
            raise ValueError(f"low_tick must be below high_tick (got {low_tick} >= {high_tick})")
        if int(low_tick) < MIN_TICK or int(high_tick) > MAX_TICK:
            raise ValueError(f"ticks must lie within [{MIN_TICK}, {MAX_TICK}] (got {low_tick}, {high_tick})")

        target = self.pool(self._resolve_pool(pool))
        rng = ConcentratedDirective(
            low_tick=int(low_tick),
            high_tick=int(high_tick),
            is_rel_tick=False,
            is_add=True,
            roll_type=RollType.LITERAL,
            liquidity=abs(int(liq)),
        )
        target.passive.concentrated.append(rng)
        return rng

    def append_range_burn(
        self,
        low_tick: int,
        high_tick: int,
        liq: int,
        pool: Optional[PoolHandle] = None,
    ) -> ConcentratedDirective:
        rng = self.append_range_mint(low_tick, high_tick, liq, pool=pool)
        rng.is_add = False
        return rng

    # ---------- post-build settlement overrides ----------

    def set_open_limit(self, limit_qty: int) -> None:
        self.directive.open.limit_qty = int(limit_qty)

    def set_hop_limit(self, handle: HopHandle, limit_qty: int) -> None:
        self.hop(handle).settlement.limit_qty = int(limit_qty)

    def encode(self) -> bytes:
        return encode_directive(self.directive)
