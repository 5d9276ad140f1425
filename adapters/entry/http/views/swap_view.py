from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from adapters.entry.http.deps import get_dex_context
from adapters.entry.http.dtos.swap_dtos import SwapExecuteRequest, SwapQuoteRequest
from core.domain.enums.path_enums import PathMode
from core.domain.schemas.swap_types import SwapExecOpts
from core.services.dex_context import DexContext
from core.services.exceptions import ForcedPathUnavailableError, TransactionRevertedError
from core.services.utils import to_json_safe
from core.use_cases.swap_planner_usecase import SwapPlanner

router = APIRouter(prefix="/swap", tags=["swap"])


async def _plan(ctx: DexContext, body: SwapQuoteRequest) -> SwapPlanner:
    return await SwapPlanner.create(
        ctx,
        ctx.token_view(body.sell_token),
        ctx.token_view(body.buy_token),
        body.qty,
        body.qty_is_buy,
        body.slippage,
    )


def _force_path(planner: SwapPlanner, mode: PathMode) -> SwapPlanner:
    if mode == PathMode.ROUTER:
        return planner.use_router()
    if mode == PathMode.BYPASS:
        return planner.use_bypass()
    if mode == PathMode.PROXY:
        return planner.force_proxy()
    return planner


@router.post("/quote", summary="Impact and slippage bounds for a swap, without sending anything")
async def swap_quote(body: SwapQuoteRequest, ctx: DexContext = Depends(get_dex_context)):
    try:
        planner = await _plan(ctx, body)
        return to_json_safe(await planner.quote())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to quote swap: {exc}") from exc


@router.post("/execute", summary="Simulate or submit a slippage-bounded swap")
async def swap_execute(body: SwapExecuteRequest, ctx: DexContext = Depends(get_dex_context)):
    try:
        planner = _force_path(await _plan(ctx, body), body.path_mode)
        opts = SwapExecOpts(settlement=body.settlement, gas_est=body.gas_est)

        if body.simulate:
            result = await planner.simulate(opts)
            return to_json_safe({"simulated": True, "result": result, "quote": await planner.quote()})

        tx = await planner.swap(opts, wait=body.wait)
        return to_json_safe({"simulated": False, "tx": tx, "quote": await planner.quote()})

    except (ValueError, ForcedPathUnavailableError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TransactionRevertedError as exc:
        raise HTTPException(
            status_code=500,
            detail={
                "error": "reverted_on_chain",
                "tx": exc.tx_hash,
                "receipt": exc.receipt,
                "hint": "Slippage bound hit, or out-of-gas.",
            },
        ) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to execute swap: {exc}") from exc
