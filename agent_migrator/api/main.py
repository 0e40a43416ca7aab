"""FastAPI application entry point."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import MigratorConfig
from ..orchestrator import MigrationOrchestrator
from ..services.delta_engine import CapabilityDeltaEngine
from ..services.storage import InMemoryStore, JsonFileStore
from ..services.text_generation import TextGenerationService
from .routes import delta, migrations

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[MigratorConfig] = None,
    orchestrator: Optional[MigrationOrchestrator] = None,
    store=None
) -> FastAPI:
    """
    Build the API application.

    The orchestrator, store and delta engine are created once here and
    shared by all requests through ``app.state``.

    Args:
        config: Settings; read from the environment when omitted
        orchestrator: Pre-built orchestrator (tests inject one with fast timing)
        store: Flow store; JSON files when ``config.store_dir`` is set,
            in-memory otherwise
    """
    config = config or (orchestrator.config if orchestrator else MigratorConfig.from_env())

    if store is None and orchestrator is not None:
        store = orchestrator.store
    if store is None:
        store = JsonFileStore(config.store_dir) if config.store_dir else InMemoryStore()

    text_generator = None
    if config.llm_enabled:
        text_generator = TextGenerationService(
            api_key=config.llm_api_key,
            model=config.llm_model,
            provider=config.llm_provider,
            timeout=config.llm_timeout,
        )

    if orchestrator is None:
        orchestrator = MigrationOrchestrator(
            config=config,
            text_generator=text_generator,
            delta_engine=CapabilityDeltaEngine(text_generator),
            store=store,
        )
    elif orchestrator.store is None:
        orchestrator.store = store

    app = FastAPI(
        title="Agent Migrator API",
        description="Simulated migration of classic chatbots to AI agents",
        version="1.0.0",
    )

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.store = store
    app.state.orchestrator = orchestrator
    app.state.delta_engine = orchestrator.delta_engine

    app.include_router(migrations.router, prefix="/api", tags=["migrations"])
    app.include_router(delta.router, prefix="/api/delta", tags=["delta"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info(f"API ready (store: {type(store).__name__}, llm: {config.llm_enabled})")
    return app
