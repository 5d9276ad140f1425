from __future__ import annotations

from decimal import Decimal
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RawImpact(BaseModel):
    """Raw CrocImpact.calcImpact result (signed flows, Q64.64 final price)."""

    model_config = ConfigDict(frozen=True)

    base_flow: int
    quote_flow: int
    final_price: int


class Impact(BaseModel):
    """
    Predicted impact of a swap, captured once when the plan is built.

    sell_qty / buy_qty: display quantities the swapper gives / receives.
    final_price: display pool price after the swap (not the realized swap price).
    percent_change: relative pool price move, not the swapper's slippage.
    """

    model_config = ConfigDict(frozen=True)

    sell_qty: Decimal
    buy_qty: Decimal
    final_price: float
    percent_change: float


class SurplusSettlement(BaseModel):
    buy_dex_surplus: bool = False
    sell_dex_surplus: bool = False


class SwapExecOpts(BaseModel):
    settlement: Union[bool, SurplusSettlement] = False
    gas_est: Optional[int] = Field(None, ge=0, description="Skip live estimation and use this gas estimate")


class PoolSnapshot(BaseModel):
    """Spot price/tick read once; every derived rebalance value uses this copy."""

    model_config = ConfigDict(frozen=True)

    spot_price: float
    spot_tick: int


class RebalanceTarget(BaseModel):
    burn: Tuple[int, int]
    mint: Tuple[int, int]
    liquidity: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_ranges(self) -> "RebalanceTarget":
        for name, (lo, hi) in (("burn", self.burn), ("mint", self.mint)):
            if lo >= hi:
                raise ValueError(f"{name} range invalid (lower >= upper): [{lo}, {hi}]")
        return self
