from typing import Optional

from pydantic import BaseModel, Field

from core.domain.schemas.swap_types import RebalanceTarget


class RebalanceRequest(BaseModel):
    """
    Move a concentrated position from the burn range to the mint range.

    The position must be out of range at the current tick.
    """

    token_a: str
    token_b: str

    burn_lower: int = Field(..., description="Current position lower tick")
    burn_upper: int = Field(..., description="Current position upper tick")
    mint_lower: int = Field(..., description="New range lower tick")
    mint_upper: int = Field(..., description="New range upper tick")
    liquidity: int = Field(..., ge=0, description="Position liquidity (raw)")

    slippage: Optional[float] = Field(None, gt=0, lt=1)

    def target(self) -> RebalanceTarget:
        return RebalanceTarget(
            burn=(self.burn_lower, self.burn_upper),
            mint=(self.mint_lower, self.mint_upper),
            liquidity=self.liquidity,
        )


class RebalanceExecuteRequest(RebalanceRequest):
    simulate: bool = Field(False, description="eth_call only, nothing is broadcast")
    wait: bool = False
