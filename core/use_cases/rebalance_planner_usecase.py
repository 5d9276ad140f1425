from __future__ import annotations

import asyncio
import logging
import math
from decimal import Decimal
from typing import Any, Optional, Tuple

from config import get_settings
from core.domain.enums.directive_enums import RollType
from core.domain.enums.path_enums import CallPath
from core.domain.interfaces.chain_views_interface import PoolView, TokenView
from core.domain.schemas.directive_types import PoolDirective
from core.domain.schemas.swap_types import PoolSnapshot, RebalanceTarget
from core.services.dex_context import DexContext
from core.services.directive_builder import DirectiveBuilder
from core.services.exceptions import RebalanceNotOutOfRangeError
from core.services.normalize import sort_base_quote_views
from core.services.price_math import (
    base_token_for_conc_liq,
    conc_deposit_balance,
    encode_croc_price,
    quote_token_for_conc_liq,
    tick_to_price,
)
from core.use_cases.swap_planner_usecase import SwapPlanner

logger = logging.getLogger(__name__)

BPS = 10_000

# Finite settlement caps: a balance surprise mid-transaction can cost at most this much.
OPEN_SETTLE_LIMIT = -1_000_000_000_000
HOP_SETTLE_LIMIT = -10_000_000_000


class RebalancePlanner:
    """
    Moves an out-of-range concentrated position into a new range in one userCmd.

    The directive burns the old range, swaps the computed fraction of the
    out-of-range token (deferred until the burn settles) and mints the new
    range with whatever balance is left. Spot price/tick are read once at
    construction; every derived value uses that snapshot.
    """

    def __init__(
        self,
        ctx: DexContext,
        base_token: TokenView,
        quote_token: TokenView,
        target: RebalanceTarget,
        snapshot: PoolSnapshot,
        slippage: float,
    ):
        self.ctx = ctx
        self.base_token = base_token
        self.quote_token = quote_token
        self.burn_range = target.burn
        self.mint_range = target.mint
        self.liquidity = int(target.liquidity)
        self.snapshot = snapshot
        self.slippage = float(slippage)

    @classmethod
    async def create(
        cls,
        ctx: DexContext,
        token_a: TokenView,
        token_b: TokenView,
        target: RebalanceTarget,
        slippage: Optional[float] = None,
        pool_view: Optional[PoolView] = None,
    ) -> "RebalancePlanner":
        base, quote = sort_base_quote_views(token_a, token_b)
        pool_view = pool_view or ctx.pool_view(base, quote)
        spot_price, spot_tick = await asyncio.gather(pool_view.spot_price(), pool_view.spot_tick())

        if slippage is None:
            slippage = get_settings().REBALANCE_SLIPPAGE

        snapshot = PoolSnapshot(spot_price=spot_price, spot_tick=spot_tick)
        return cls(ctx, base, quote, target, snapshot, slippage)

    # ---------- range side ----------

    def is_base_out_of_range(self) -> bool:
        spot = self.snapshot.spot_tick
        low, high = self.burn_range
        if spot >= high:
            return True
        if spot < low:
            return False
        raise RebalanceNotOutOfRangeError(spot, low, high)

    def pivot_tokens(self) -> Tuple[TokenView, TokenView]:
        """(token held by the old position, token to swap into)."""
        if self.is_base_out_of_range():
            return self.base_token, self.quote_token
        return self.quote_token, self.base_token

    # ---------- sizing ----------

    def balance_percent(self) -> float:
        base_share = conc_deposit_balance(
            self.snapshot.spot_price,
            tick_to_price(self.mint_range[0]),
            tick_to_price(self.mint_range[1]),
        )
        return (1.0 - base_share) if self.is_base_out_of_range() else base_share

    def swap_fraction(self) -> int:
        """Share (bps) of the held token to swap, padded by slippage and capped at 100%."""
        swap_prop = self.balance_percent() + self.slippage
        return int(math.floor(min(swap_prop, 1.0) * BPS))

    def current_collateral(self) -> int:
        token_fn = base_token_for_conc_liq if self.is_base_out_of_range() else quote_token_for_conc_liq
        return token_fn(
            self.snapshot.spot_price,
            self.liquidity,
            tick_to_price(self.burn_range[0]),
            tick_to_price(self.burn_range[1]),
        )

    def convert_collateral(self) -> int:
        return self.current_collateral() * self.swap_fraction() // BPS

    async def mint_input(self) -> Decimal:
        remaining = self.current_collateral() - self.convert_collateral()
        held, _ = self.pivot_tokens()
        return await held.to_display(remaining)

    async def swap_output(self) -> Decimal:
        sell_token, buy_token = self.pivot_tokens()
        swap = await SwapPlanner.create(
            self.ctx, sell_token, buy_token, self.convert_collateral(), False, self.slippage
        )
        return swap.plan.impact.buy_qty

    # ---------- directive ----------

    def _setup_swap(self, pool: PoolDirective) -> None:
        sell_base = self.is_base_out_of_range()

        pool.chain.swap_defer = True
        pool.swap.roll_type = RollType.ROLL_FRACTION
        pool.swap.qty = self.swap_fraction()
        pool.swap.is_buy = sell_base
        pool.swap.in_base_qty = sell_base

        price_mult = (1 + self.slippage) if sell_base else (1 - self.slippage)
        pool.swap.limit_price = encode_croc_price(self.snapshot.spot_price * price_mult)

    def format_directive(self) -> DirectiveBuilder:
        open_token, close_token = self.pivot_tokens()
        pool_idx = self.ctx.chain.pool_index

        builder = DirectiveBuilder(open_token.address)
        hop = builder.append_hop(close_token.address)

        burn_pool = builder.append_pool(pool_idx, hop=hop)
        builder.append_range_burn(self.burn_range[0], self.burn_range[1], self.liquidity, pool=burn_pool)
        self._setup_swap(builder.pool(burn_pool))

        mint_pool = builder.append_pool(pool_idx, hop=hop)
        mint = builder.append_range_mint(self.mint_range[0], self.mint_range[1], 0, pool=mint_pool)
        mint.roll_type = RollType.ROLL_ENTIRE

        builder.set_open_limit(OPEN_SETTLE_LIMIT)
        builder.set_hop_limit(hop, HOP_SETTLE_LIMIT)
        return builder

    def _user_cmd(self) -> Any:
        payload = self.format_directive().encode()
        return self.ctx.dex.functions.userCmd(int(CallPath.LONG_PATH), payload)

    # ---------- execution ----------

    async def sim_static(self) -> Any:
        return await self.ctx.txs.call(self._user_cmd())

    async def rebalance(self, *, wait: bool = False) -> dict:
        fn = self._user_cmd()
        logger.info(
            "submitting rebalance burn=%s mint=%s tick=%s fraction_bps=%s",
            self.burn_range, self.mint_range, self.snapshot.spot_tick, self.swap_fraction(),
        )
        return await self.ctx.txs.send(fn, wait=wait)

    def plan(self) -> dict:
        builder = self.format_directive()
        return {
            "base_out_of_range": self.is_base_out_of_range(),
            "spot_price": self.snapshot.spot_price,
            "spot_tick": self.snapshot.spot_tick,
            "swap_fraction_bps": self.swap_fraction(),
            "current_collateral": self.current_collateral(),
            "convert_collateral": self.convert_collateral(),
            "directive": builder.encode(),
        }
