"""Delta scenario endpoint: what a migrated agent adds over its classic bot."""

from typing import Optional

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from ...services.demo_data import delta_scenario
from ..models import DeltaResponse, DeltaScenarioResponse

router = APIRouter()


@router.get("", response_model=DeltaScenarioResponse)
async def get_delta(request: Request, classic_id: Optional[str] = None):
    """Rule-based comparison of a classic bot and its agent, with a narrative summary."""
    classic, agent = delta_scenario(classic_id)
    engine = request.app.state.delta_engine

    delta = engine.diff(classic, agent)
    summary = await run_in_threadpool(engine.summarize, classic, agent, delta)

    return DeltaScenarioResponse(
        classic=classic.to_dict(),
        agent=agent.to_dict(),
        delta=DeltaResponse(**delta.to_dict()),
        summary=summary,
    )
