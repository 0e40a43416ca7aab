"""Migration planning, execution and inspection endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request

from ...exceptions import InvalidFlowState
from ...models.migration import MigrationFlow
from ...orchestrator import MigrationOrchestrator
from ...services.demo_data import get_classic_bot, list_classic_bots
from ..models import (
    BotListResponse,
    BotSummary,
    DeltaResponse,
    MigrationCreate,
    MigrationListResponse,
    MigrationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _orchestrator(request: Request) -> MigrationOrchestrator:
    return request.app.state.orchestrator


def _get_flow(request: Request, migration_id: str) -> MigrationFlow:
    try:
        flow = request.app.state.store.get(migration_id)
    except ValueError:
        flow = None
    if not flow:
        raise HTTPException(status_code=404, detail="Migration not found")
    return flow


def _to_response(flow: MigrationFlow) -> MigrationResponse:
    return MigrationResponse(**flow.to_dict())


@router.get("/bots", response_model=BotListResponse)
async def list_bots():
    """List the classic bots available for migration."""
    bots = []
    for bot in list_classic_bots():
        sets = bot.capability_sets()
        migratable = sum(len(bot.migratable_units(name)) for name in sets)
        bots.append(BotSummary(
            id=bot.id,
            name=bot.name,
            description=bot.description,
            platform=bot.platform,
            topics=len(bot.topics),
            entities=len(bot.entities),
            automation_flows=len(bot.automation_flows),
            channels=len(bot.channels),
            migratable_units=migratable,
            total_units=sum(len(ids) for ids in sets.values()),
        ))
    return BotListResponse(bots=bots, total=len(bots))


@router.post("/migrations", response_model=MigrationResponse)
async def create_migration(data: MigrationCreate, request: Request, background_tasks: BackgroundTasks):
    """Plan a migration and, unless told otherwise, start it in the background."""
    bot = get_classic_bot(data.bot_id)
    if not bot:
        raise HTTPException(status_code=404, detail="Bot not found")

    orchestrator = _orchestrator(request)
    try:
        flow = orchestrator.plan(bot, data.agent_name, data.declared_capabilities)
    except InvalidFlowState as e:
        raise HTTPException(status_code=422, detail=str(e))

    response = _to_response(flow)
    if data.start:
        background_tasks.add_task(orchestrator.run, flow)
    return response


@router.get("/migrations", response_model=MigrationListResponse)
async def list_migrations(request: Request):
    """List all migrations."""
    store = request.app.state.store
    flows = [store.get(flow_id) for flow_id in store.list_ids()]
    migrations = [_to_response(f) for f in flows if f is not None]
    return MigrationListResponse(migrations=migrations, total=len(migrations))


@router.get("/migrations/{migration_id}", response_model=MigrationResponse)
async def get_migration(migration_id: str, request: Request):
    """Get a specific migration."""
    return _to_response(_get_flow(request, migration_id))


@router.post("/migrations/{migration_id}/start")
async def start_migration(migration_id: str, request: Request, background_tasks: BackgroundTasks):
    """Start a planned migration."""
    flow = _get_flow(request, migration_id)
    orchestrator = _orchestrator(request)
    if not flow.is_fresh or orchestrator.is_running(migration_id):
        raise HTTPException(
            status_code=409,
            detail=f"Cannot start migration in status: {flow.status.value}"
        )
    background_tasks.add_task(orchestrator.run, flow)
    return {"status": "started", "migration_id": migration_id}


@router.get("/migrations/{migration_id}/delta", response_model=DeltaResponse)
async def migration_delta(migration_id: str, request: Request):
    """Capability delta between the source bot and the produced agent."""
    flow = _get_flow(request, migration_id)
    delta = request.app.state.delta_engine.diff(flow.source, flow.target)
    return DeltaResponse(**delta.to_dict())
