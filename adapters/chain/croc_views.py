"""
web3.py implementations of the read-side chain views used by the planners.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Callable, Optional

from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract

from adapters.chain.croc_abis import ABI_ERC20
from core.domain.interfaces.chain_views_interface import (
    HotPathFlagReader,
    ImpactQuery,
    NativeAssetView,
    PoolView,
    TokenQty,
    TokenView,
)
from core.domain.schemas.swap_types import RawImpact
from core.services.normalize import ZERO_ADDRESS, is_native
from core.services.price_math import decimal_ctx, decode_croc_price, to_display_price

NATIVE_DECIMALS = 18


class CrocTokenView(TokenView):
    """ERC20 (or native ETH at the zero address) with decimals read once on first use."""

    def __init__(self, w3: AsyncWeb3, address: str, decimals: Optional[int] = None):
        self.w3 = w3
        self._address = ZERO_ADDRESS if is_native(address) else Web3.to_checksum_address(address)
        self._decimals = NATIVE_DECIMALS if is_native(address) else decimals

    @property
    def address(self) -> str:
        return self._address

    async def decimals(self) -> int:
        if self._decimals is None:
            erc = self.w3.eth.contract(address=self._address, abi=ABI_ERC20)
            self._decimals = int(await erc.functions.decimals().call())
        return self._decimals

    async def norm_qty(self, qty: TokenQty) -> int:
        if isinstance(qty, int):
            return qty
        decs = await self.decimals()
        with decimal_ctx():
            scaled = Decimal(str(qty)) * (Decimal(10) ** decs)
            if scaled != scaled.to_integral_value():
                raise ValueError(f"quantity {qty} has more precision than token decimals")
            return int(scaled)

    async def to_display(self, raw_qty: int) -> Decimal:
        decs = await self.decimals()
        with decimal_ctx():
            return Decimal(int(raw_qty)) / (Decimal(10) ** decs)

    async def round_qty(self, qty: TokenQty) -> int:
        if isinstance(qty, int):
            return qty
        decs = await self.decimals()
        with decimal_ctx():
            truncated = Decimal(str(qty)).quantize(Decimal(1).scaleb(-decs), rounding=ROUND_DOWN)
        return await self.norm_qty(truncated)


class CrocPoolView(PoolView):
    def __init__(self, base: CrocTokenView, quote: CrocTokenView, query: AsyncContract, pool_idx: int):
        self.base = base
        self.quote = quote
        self.query = query
        self.pool_idx = int(pool_idx)

    async def spot_price(self) -> float:
        raw = await self.query.functions.queryPrice(self.base.address, self.quote.address, self.pool_idx).call()
        return decode_croc_price(int(raw))

    async def spot_tick(self) -> int:
        return int(await self.query.functions.queryCurveTick(self.base.address, self.quote.address, self.pool_idx).call())

    async def display_price(self) -> float:
        return await self.to_display_price(await self.spot_price())

    async def to_display_price(self, spot_price: float) -> float:
        return to_display_price(spot_price, await self.base.decimals(), await self.quote.decimals())


class CrocImpactQuery(ImpactQuery):
    def __init__(self, impact: AsyncContract):
        self.impact = impact

    async def calc_impact(
        self,
        base: str,
        quote: str,
        pool_idx: int,
        is_buy: bool,
        in_base_qty: bool,
        qty: int,
        tip: int,
        limit_price: int,
    ) -> RawImpact:
        base_flow, quote_flow, final_price = await self.impact.functions.calcImpact(
            base, quote, int(pool_idx), bool(is_buy), bool(in_base_qty), int(qty), int(tip), int(limit_price)
        ).call()
        return RawImpact(base_flow=int(base_flow), quote_flow=int(quote_flow), final_price=int(final_price))


class CrocSlotReader(HotPathFlagReader):
    """Reads the dex's packed state slot to find out whether the hot path swap is open."""

    STATE_SLOT = 0
    HOT_OPEN_OFFSET = 22  # byte offset of the hotPathOpen_ bool within the slot

    def __init__(self, w3: AsyncWeb3, dex_addr: str):
        self.w3 = w3
        self.dex_addr = Web3.to_checksum_address(dex_addr)

    async def read_slot(self, slot: int) -> int:
        raw = await self.w3.eth.get_storage_at(self.dex_addr, slot)
        return int.from_bytes(bytes(raw), "big")

    async def is_hot_path_open(self) -> bool:
        slot_val = await self.read_slot(self.STATE_SLOT)
        return ((slot_val >> (self.HOT_OPEN_OFFSET * 8)) & 0xFF) != 0


class CrocEthView(NativeAssetView):
    """Native ETH surplus collateral of the owner held inside the dex.

    `owner` is resolved on each read so views can be wired before a signer exists.
    """

    def __init__(self, query: AsyncContract, owner: Callable[[], str]):
        self.query = query
        self.owner = owner

    async def surplus(self) -> int:
        owner = Web3.to_checksum_address(self.owner())
        return int(await self.query.functions.querySurplus(owner, ZERO_ADDRESS).call())

    async def amount_needed_beyond_surplus(self, amount: int) -> int:
        surplus = await self.surplus()
        return 0 if surplus > int(amount) else int(amount) - surplus
