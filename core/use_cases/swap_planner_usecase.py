from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Tuple

from eth_abi import encode as abi_encode

from config import get_settings
from core.domain.enums.path_enums import CallPath, PathMode
from core.domain.interfaces.chain_views_interface import PoolView, TokenQty, TokenView
from core.domain.schemas.swap_types import Impact, SurplusSettlement, SwapExecOpts
from core.services.dex_context import DexContext
from core.services.exceptions import ForcedPathUnavailableError
from core.services.normalize import is_native, sort_base_quote_views
from core.services.price_math import MAX_SQRT_PRICE, MIN_SQRT_PRICE, decimal_ctx, decode_croc_price
from core.services.surplus_flags import SurplusFlags, decode_surplus_flag, encode_surplus_arg

logger = logging.getLogger(__name__)

# Added on top of the gas estimate before submitting.
GAS_PADDING = 15_000

# Price slippage tolerance as a multiple of the quantity slippage (300%).
PRICE_SLIP_MULT = 3.0

POOL_TIP = 0

# (base, quote, poolIdx, isBuy, inBaseQty, qty, tip, limitPrice, minOut, reserveFlags)
SWAP_CMD_TYPES = ["address", "address", "uint256", "bool", "bool", "uint128", "uint16", "uint128", "uint128", "uint8"]


@dataclass(frozen=True)
class SwapPlan:
    """
    Canonicalized swap request plus the impact snapshot taken when it was built.

    The impact is never refreshed: build a new plan to re-quote.
    """

    base_token: TokenView
    quote_token: TokenView
    sell_base: bool
    qty_in_base: bool
    qty: int
    slippage: float
    impact: Impact

    @property
    def price_slippage(self) -> float:
        return self.slippage * PRICE_SLIP_MULT

    @property
    def qty_is_sell(self) -> bool:
        """True when the fixed quantity is the side the swapper gives up."""
        return self.sell_base == self.qty_in_base

    @property
    def sell_token(self) -> TokenView:
        return self.base_token if self.sell_base else self.quote_token

    @property
    def buy_token(self) -> TokenView:
        return self.quote_token if self.sell_base else self.base_token


async def calc_impact(
    ctx: DexContext,
    pool_view: PoolView,
    base: TokenView,
    quote: TokenView,
    sell_base: bool,
    qty_in_base: bool,
    qty: int,
) -> Impact:
    """
    Query the impact contract with no price bound and convert flows to display units.
    """
    limit_price = MAX_SQRT_PRICE if sell_base else MIN_SQRT_PRICE

    raw, start_price = await asyncio.gather(
        ctx.impact_query.calc_impact(
            base.address, quote.address, ctx.chain.pool_index,
            sell_base, qty_in_base, qty, POOL_TIP, limit_price,
        ),
        pool_view.display_price(),
    )
    if not start_price:
        raise ValueError(f"pool {base.address}/{quote.address} has no price (uninitialized?)")

    base_qty, quote_qty, final_price = await asyncio.gather(
        base.to_display(abs(raw.base_flow)),
        quote.to_display(abs(raw.quote_flow)),
        pool_view.to_display_price(decode_croc_price(raw.final_price)),
    )

    return Impact(
        sell_qty=base_qty if sell_base else quote_qty,
        buy_qty=quote_qty if sell_base else base_qty,
        final_price=final_price,
        percent_change=(final_price - start_price) / start_price,
    )


class SwapPlanner:
    """
    Plans and submits a single-pool Croc swap bounded by slippage.

    Quantity protection comes from `calc_slip_qty` (min out / max in). The
    limit price is always the curve extreme in the trade direction.

    Entry point selection per call:
      - router / bypass: direct `swap` on that router (must be configured)
      - proxy, or networks flagged dflt_cold_swap: `userCmd(HOT_PROXY, abi(args))` on the dex
      - auto: direct `swap` if the dex hot path is open, else `userCmd`
    """

    def __init__(self, ctx: DexContext, plan: SwapPlan):
        self.ctx = ctx
        self.plan = plan
        self.path_mode = PathMode.AUTO

    @classmethod
    async def create(
        cls,
        ctx: DexContext,
        sell_token: TokenView,
        buy_token: TokenView,
        qty: TokenQty,
        qty_is_buy: bool,
        slippage: Optional[float] = None,
    ) -> "SwapPlanner":
        base, quote = sort_base_quote_views(sell_token, buy_token)
        sell_base = base is sell_token
        qty_in_base = sell_base != qty_is_buy

        raw_qty = await (base if qty_in_base else quote).norm_qty(qty)
        if slippage is None:
            slippage = get_settings().SWAP_SLIPPAGE

        impact = await calc_impact(ctx, ctx.pool_view(base, quote), base, quote, sell_base, qty_in_base, raw_qty)
        logger.debug(
            "swap impact base=%s quote=%s sell_base=%s qty=%s impact=%s",
            base.address, quote.address, sell_base, raw_qty, impact,
        )

        plan = SwapPlan(
            base_token=base,
            quote_token=quote,
            sell_base=sell_base,
            qty_in_base=qty_in_base,
            qty=raw_qty,
            slippage=float(slippage),
            impact=impact,
        )
        return cls(ctx, plan)

    # ---------- path forcing ----------

    def force_proxy(self) -> "SwapPlanner":
        self.path_mode = PathMode.PROXY
        return self

    def use_router(self) -> "SwapPlanner":
        self.path_mode = PathMode.ROUTER
        return self

    def use_bypass(self) -> "SwapPlanner":
        self.path_mode = PathMode.BYPASS
        return self

    # ---------- bounds ----------

    async def calc_slip_qty(self) -> int:
        """
        Slippage bound on the floating side: min out for fixed-sell, max in for fixed-buy.
        """
        p = self.plan
        with decimal_ctx():
            slippage = Decimal(str(p.slippage))
            if p.qty_is_sell:
                slip_qty = p.impact.buy_qty * (1 - slippage)
            else:
                slip_qty = p.impact.sell_qty * (1 + slippage)

        floating_view = p.base_token if not p.qty_in_base else p.quote_token
        return await floating_view.round_qty(slip_qty)

    def calc_limit_price(self) -> int:
        return MAX_SQRT_PRICE if self.plan.sell_base else MIN_SQRT_PRICE

    # ---------- call assembly ----------

    def _mask_surplus_flags(self, opts: SwapExecOpts) -> SurplusFlags:
        settlement = opts.settlement
        if isinstance(settlement, bool):
            return settlement, settlement
        if not isinstance(settlement, SurplusSettlement):
            return False, False
        if self.plan.sell_base:
            return settlement.sell_dex_surplus, settlement.buy_dex_surplus
        return settlement.buy_dex_surplus, settlement.sell_dex_surplus

    def mask_surplus_args(self, opts: Optional[SwapExecOpts] = None) -> int:
        return encode_surplus_arg(self._mask_surplus_flags(opts or SwapExecOpts()))

    async def swap_args(self, surplus_flags: int) -> Tuple[Any, ...]:
        p = self.plan
        return (
            p.base_token.address,
            p.quote_token.address,
            self.ctx.chain.pool_index,
            p.sell_base,
            p.qty_in_base,
            p.qty,
            POOL_TIP,
            self.calc_limit_price(),
            await self.calc_slip_qty(),
            surplus_flags,
        )

    async def attach_eth_msg(self, surplus_flags: int) -> int:
        """
        msg.value for the swap. Native ETH is always base, so only base sells pay.
        """
        p = self.plan
        if not p.sell_base or not is_native(p.base_token.address):
            return 0

        # On the floating side send the slippage bound; the dex refunds the unused part.
        val = p.qty if p.qty_in_base else await self.calc_slip_qty()

        if decode_surplus_flag(surplus_flags)[0]:
            return await self.ctx.eth_view.amount_needed_beyond_surplus(val)
        return val

    def _tx_target(self) -> Any:
        if self.path_mode == PathMode.ROUTER:
            if self.ctx.router is None:
                raise ForcedPathUnavailableError(self.path_mode.value)
            return self.ctx.router
        if self.path_mode == PathMode.BYPASS:
            if self.ctx.router_bypass is None:
                raise ForcedPathUnavailableError(self.path_mode.value)
            return self.ctx.router_bypass
        return self.ctx.dex

    async def _use_hot_path(self) -> bool:
        if self.path_mode in (PathMode.ROUTER, PathMode.BYPASS):
            return True
        if self.path_mode == PathMode.PROXY or self.ctx.chain.dflt_cold_swap:
            return False
        return await self.ctx.slot_reader.is_hot_path_open()

    async def build_call(self, opts: Optional[SwapExecOpts] = None) -> Tuple[Any, int]:
        """
        Resolve the entry point against live state and return (contract function, msg.value).
        """
        target = self._tx_target()
        surplus_flags = self.mask_surplus_args(opts)
        args = await self.swap_args(surplus_flags)
        value = await self.attach_eth_msg(surplus_flags)

        if await self._use_hot_path():
            return target.functions.swap(*args), value

        cmd = abi_encode(SWAP_CMD_TYPES, list(args))
        return target.functions.userCmd(int(CallPath.HOT_PROXY), cmd), value

    # ---------- execution ----------

    async def estimate_gas(self, opts: Optional[SwapExecOpts] = None) -> int:
        fn, value = await self.build_call(opts)
        return await self.ctx.txs.estimate_gas(fn, value=value)

    async def _gas_limit(self, fn: Any, value: int, opts: SwapExecOpts) -> int:
        gas_est = opts.gas_est if opts.gas_est is not None else await self.ctx.txs.estimate_gas(fn, value=value)
        return int(gas_est) + GAS_PADDING

    async def simulate(self, opts: Optional[SwapExecOpts] = None) -> Any:
        opts = opts or SwapExecOpts()
        fn, value = await self.build_call(opts)
        gas_limit = await self._gas_limit(fn, value, opts)
        return await self.ctx.txs.call(fn, value=value, gas_limit=gas_limit)

    async def swap(self, opts: Optional[SwapExecOpts] = None, *, wait: bool = False) -> dict:
        opts = opts or SwapExecOpts()
        fn, value = await self.build_call(opts)
        gas_limit = await self._gas_limit(fn, value, opts)

        logger.info(
            "submitting swap mode=%s fn=%s sell_base=%s qty=%s value=%s gas=%s",
            self.path_mode.value, getattr(fn, "fn_name", "?"), self.plan.sell_base,
            self.plan.qty, value, gas_limit,
        )
        return await self.ctx.txs.send(fn, value=value, gas_limit=gas_limit, wait=wait)

    async def build_raw_tx(self, opts: Optional[SwapExecOpts] = None) -> dict:
        """
        Unsigned, populated direct-swap transaction. Meant for L1 data fee
        estimation on rollups; it is not a valid signed transaction.
        """
        surplus_flags = self.mask_surplus_args(opts)
        fn = self.ctx.dex.functions.swap(*(await self.swap_args(surplus_flags)))
        return await self.ctx.txs.build_unsigned(fn, value=await self.attach_eth_msg(surplus_flags))

    async def quote(self) -> dict:
        """Summary of the plan for callers that only want to inspect it."""
        p = self.plan
        return {
            "base_token": p.base_token.address,
            "quote_token": p.quote_token.address,
            "sell_base": p.sell_base,
            "qty_in_base": p.qty_in_base,
            "qty": p.qty,
            "slippage": p.slippage,
            "impact": p.impact,
            "slip_qty": await self.calc_slip_qty(),
            "limit_price": self.calc_limit_price(),
            "path_mode": self.path_mode,
        }
