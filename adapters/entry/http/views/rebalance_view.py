from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from adapters.entry.http.deps import get_dex_context
from adapters.entry.http.dtos.rebalance_dtos import RebalanceExecuteRequest, RebalanceRequest
from core.services.dex_context import DexContext
from core.services.exceptions import RebalanceNotOutOfRangeError, TransactionRevertedError
from core.services.utils import to_json_safe
from core.use_cases.rebalance_planner_usecase import RebalancePlanner

router = APIRouter(prefix="/rebalance", tags=["rebalance"])


async def _planner(ctx: DexContext, body: RebalanceRequest) -> RebalancePlanner:
    return await RebalancePlanner.create(
        ctx,
        ctx.token_view(body.token_a),
        ctx.token_view(body.token_b),
        body.target(),
        body.slippage,
    )


@router.post("/plan", summary="Build the burn/swap/mint directive for an out-of-range position")
async def rebalance_plan(body: RebalanceRequest, ctx: DexContext = Depends(get_dex_context)):
    try:
        planner = await _planner(ctx, body)
        return to_json_safe(planner.plan())
    except RebalanceNotOutOfRangeError as exc:
        raise HTTPException(
            status_code=409,
            detail={"error": "not_out_of_range", "tick": exc.spot_tick, "range": [exc.low_tick, exc.high_tick]},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to plan rebalance: {exc}") from exc


@router.post("/execute", summary="Simulate or submit the rebalance directive via userCmd")
async def rebalance_execute(body: RebalanceExecuteRequest, ctx: DexContext = Depends(get_dex_context)):
    try:
        planner = await _planner(ctx, body)
        if body.simulate:
            return to_json_safe({"simulated": True, "result": await planner.sim_static(), "plan": planner.plan()})
        tx = await planner.rebalance(wait=body.wait)
        return to_json_safe({"simulated": False, "tx": tx, "plan": planner.plan()})

    except RebalanceNotOutOfRangeError as exc:
        raise HTTPException(
            status_code=409,
            detail={"error": "not_out_of_range", "tick": exc.spot_tick, "range": [exc.low_tick, exc.high_tick]},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TransactionRevertedError as exc:
        raise HTTPException(
            status_code=500,
            detail={"error": "reverted_on_chain", "tx": exc.tx_hash, "receipt": exc.receipt},
        ) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to execute rebalance: {exc}") from exc
