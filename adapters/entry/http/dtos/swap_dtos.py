from typing import Optional, Union

from pydantic import BaseModel, Field

from core.domain.enums.path_enums import PathMode
from core.domain.schemas.swap_types import SurplusSettlement


class SwapQuoteRequest(BaseModel):
    sell_token: str = Field(..., description="Token paid by the swapper (zero address = native ETH)")
    buy_token: str = Field(..., description="Token received by the swapper")
    qty: str = Field(..., description='Fixed quantity in HUMAN units (e.g. "1.5")')
    qty_is_buy: bool = Field(False, description="True if qty is the amount bought, False if sold")
    slippage: Optional[float] = Field(None, gt=0, lt=1, description="Fraction, e.g. 0.01 = 1%")


class SwapExecuteRequest(SwapQuoteRequest):
    path_mode: PathMode = Field(PathMode.AUTO, description="auto|router|bypass|proxy")
    settlement: Union[bool, SurplusSettlement] = False
    gas_est: Optional[int] = Field(None, ge=0)
    simulate: bool = Field(False, description="eth_call only, nothing is broadcast")
    wait: bool = False
