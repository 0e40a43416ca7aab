"""Migration orchestrator - plans and runs the classic bot to AI agent flow."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from .config import MigratorConfig
from .exceptions import InvalidFlowState, StepActionFailure
from .models.configuration import (
    AgentStatus,
    CAPABILITY_COLLECTIONS,
    EntityType,
    SourceConfiguration,
    TargetConfiguration,
    TopicType,
)
from .models.migration import (
    CheckResult,
    FlowStatus,
    MigrationFlow,
    MigrationStep,
    PHASE_AFTER_STEP,
    StepStatus,
)
from .services.delta_engine import CapabilityDeltaEngine
from .services.runtime import (
    AsyncioScheduler,
    Clock,
    IdGenerator,
    RandomSource,
    Scheduler,
    default_random,
    utc_now,
    uuid_ids,
)
from .services.storage import FlowStore
from .services.text_generation import TextGenerator, generate_or_fallback

logger = logging.getLogger(__name__)


StepAction = Callable[[MigrationFlow], Awaitable[str]]


@dataclass(frozen=True)
class StepDefinition:
    """Static description of one planned step."""
    id: str
    name: str
    description: str
    pending_details: str


STEP_PLAN: Tuple[StepDefinition, ...] = (
    StepDefinition(
        "open-source", "Open Classic Bot",
        "Accessing the source classic chatbot",
        "Connecting to the source platform...",
    ),
    StepDefinition(
        "clone-and-convert", "Clone and Convert",
        "Creating a copy and converting to AI agent",
        "Preparing to clone the bot...",
    ),
    StepDefinition(
        "name-and-create", "Name and Create",
        "Setting up the new AI agent with custom name",
        "Configuring agent name...",
    ),
    StepDefinition(
        "review-migrated-content", "Review Migrated Content",
        "Validating topics, entities, and automation flows",
        "Analyzing migrated content...",
    ),
    StepDefinition(
        "reconfigure-settings", "Reconfigure Settings",
        "Setting up authorization, channels, and security",
        "Configuring security settings...",
    ),
    StepDefinition(
        "run-tests", "Test Everything",
        "Validating all flows, topics, and integrations",
        "Running comprehensive tests...",
    ),
    StepDefinition(
        "deploy", "Deploy Agent",
        "Publishing the new AI agent to production",
        "Preparing for deployment...",
    ),
)

# Named checks run by the test step. Outcomes are drawn from the injected
# random source: a demo simplification, not a real test harness.
TEST_BATTERY: Tuple[str, ...] = (
    "Topic Validation",
    "Entity Recognition",
    "Automation Integration",
    "Channel Connectivity",
    "Authorization Security",
    "Custom Component Integration",
)

COLLECTION_LABELS = {
    "topics": "topics",
    "entities": "entities",
    "automation_flows": "automation flows",
    "channels": "channels",
    "skills": "skills",
    "custom_components": "custom components",
}


@dataclass
class ProgressEvent:
    """A change on a flow, pushed to progress listeners."""
    type: str  # "step_started", "progress", "step_complete", "error", "complete"
    flow_id: str
    flow_status: FlowStatus
    step_id: Optional[str] = None
    step_name: Optional[str] = None
    step_status: Optional[StepStatus] = None
    progress: float = 0.0
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "flow_id": self.flow_id,
            "flow_status": self.flow_status.value,
            "step_id": self.step_id,
            "step_name": self.step_name,
            "step_status": self.step_status.value if self.step_status else None,
            "progress": round(self.progress, 2),
            "message": self.message,
            "error": self.error,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


ProgressListener = Callable[[ProgressEvent], None]


class MigrationOrchestrator:
    """
    Plans and runs migration flows.

    A flow is a fixed sequence of seven steps run strictly one after another.
    While a step's action is suspended a progress ticker raises the step's
    progress in small random increments, always staying below 100; the
    ticker is stopped as soon as the action settles. The first failing step
    aborts the flow: earlier steps keep their results (no rollback) and
    later steps stay pending.

    One orchestrator can run many independent flows concurrently; flows
    share no mutable state.
    """

    def __init__(
        self,
        config: Optional[MigratorConfig] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
        random_source: Optional[RandomSource] = None,
        progress_random: Optional[RandomSource] = None,
        delta_engine: Optional[CapabilityDeltaEngine] = None,
        text_generator: Optional[TextGenerator] = None,
        store: Optional[FlowStore] = None,
        action_overrides: Optional[Dict[str, StepAction]] = None,
        listeners: Optional[List[ProgressListener]] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Timing, test battery and deployment settings
            id_generator: Produces flow, agent and deployment identifiers
            clock: Produces timestamps
            scheduler: Delay primitive for simulated latency and ticks
            random_source: Decides test battery outcomes
            progress_random: Sizes progress ticks
            delta_engine: Used by the review step
            text_generator: Optional narrative summaries in the review step
            store: Optional persistence; flows are saved as each step starts,
                on progress ticks and after every step
            action_overrides: Replacement actions keyed by step id
            listeners: Progress listeners
        """
        self.config = config or MigratorConfig()
        self.id_generator = id_generator or uuid_ids
        self.clock = clock or utc_now
        self.scheduler = scheduler or AsyncioScheduler()
        self.random = random_source or default_random()
        self.progress_random = progress_random or default_random()
        self.delta_engine = delta_engine or CapabilityDeltaEngine()
        self.text_generator = text_generator
        self.store = store
        self.listeners: List[ProgressListener] = list(listeners or [])

        known = {d.id for d in STEP_PLAN}
        unknown = set(action_overrides or {}) - known
        if unknown:
            raise ValueError(f"Unknown step ids in action_overrides: {sorted(unknown)}")
        self.action_overrides: Dict[str, StepAction] = dict(action_overrides or {})

        self._active_tickers = 0
        self._running: Set[str] = set()
        self._writes: Dict[str, "asyncio.Task[None]"] = {}

    def is_running(self, flow_id: str) -> bool:
        """True while ``run`` is executing the flow with this id."""
        return flow_id in self._running

    @property
    def active_tickers(self) -> int:
        """Number of progress tickers currently running."""
        return self._active_tickers

    def add_listener(self, listener: ProgressListener) -> None:
        self.listeners.append(listener)

    def plan(
        self,
        source: SourceConfiguration,
        agent_name: str,
        declared_capabilities: Optional[List[str]] = None
    ) -> MigrationFlow:
        """
        Build a fresh flow for migrating ``source`` into a new agent.

        Args:
            source: The classic bot to migrate
            agent_name: Display name of the agent to create
            declared_capabilities: Capabilities the new agent brings that have
                no classic counterpart

        Returns:
            MigrationFlow in ``initializing`` status with seven pending steps
        """
        if not isinstance(source, SourceConfiguration):
            raise InvalidFlowState("plan() needs a SourceConfiguration")
        if not agent_name or not agent_name.strip():
            raise InvalidFlowState("plan() needs a non-empty agent name")

        now = self.clock()
        flow_id = self.id_generator()
        target = TargetConfiguration(
            id=self.id_generator(),
            name=agent_name.strip(),
            source_id=source.id,
            description=f"Migrated from {source.name}",
            created_at=now,
            declared_capabilities=list(declared_capabilities or []),
        )
        steps = tuple(
            MigrationStep(
                id=d.id,
                name=d.name,
                description=d.description,
                details=d.pending_details,
            )
            for d in STEP_PLAN
        )
        flow = MigrationFlow(
            id=flow_id,
            source=source,
            target=target,
            steps=steps,
            created_at=now,
        )
        logger.info(f"Planned flow {flow.id}: {source.name} -> {target.name}")
        if self.store is not None:
            self.store.put(flow.id, flow)
        return flow

    async def run(self, flow: MigrationFlow) -> MigrationFlow:
        """
        Execute every step of a freshly planned flow.

        Returns:
            The same flow, now ``completed`` or ``failed``

        Raises:
            InvalidFlowState: if the flow has already been started
        """
        if flow.id in self._running:
            raise InvalidFlowState(f"Flow {flow.id} is already running")
        if not flow.is_fresh:
            raise InvalidFlowState(
                f"Flow {flow.id} is not freshly planned (status: {flow.status.value})"
            )

        actions = self._actions()
        self._running.add(flow.id)
        logger.info(f"=== MIGRATION {flow.id} STARTED ===")

        try:
            try:
                for index, step in enumerate(flow.steps):
                    await self._execute_step(flow, step, actions[step.id])
                    if index < len(PHASE_AFTER_STEP):
                        flow.status = PHASE_AFTER_STEP[index]
                    await self._persist(flow)

                flow.status = FlowStatus.COMPLETED
                flow.completed_at = self.clock()
                flow.target.seal()
                logger.info(f"=== MIGRATION {flow.id} COMPLETED ===")
                self._emit(flow, "complete", message=f"Agent deployed at {flow.target.deployment_url}")

            except StepActionFailure as e:
                flow.status = FlowStatus.FAILED
                flow.completed_at = self.clock()
                flow.target.status = AgentStatus.ERROR
                flow.target.seal()
                logger.error(f"Migration {flow.id} failed at step {e.step_id}: {e.message}")
                self._emit(flow, "error", step=flow.get_step(e.step_id), error=e.message)

            await self._persist(flow)
        finally:
            self._running.discard(flow.id)
        return flow

    async def migrate(
        self,
        source: SourceConfiguration,
        agent_name: str,
        declared_capabilities: Optional[List[str]] = None
    ) -> MigrationFlow:
        """Plan and run in one go."""
        flow = self.plan(source, agent_name, declared_capabilities)
        return await self.run(flow)

    async def _execute_step(self, flow: MigrationFlow, step: MigrationStep, action: StepAction) -> None:
        """Run one step; raises StepActionFailure if its action fails."""
        step.start(self.clock())
        self._emit(flow, "step_started", step=step, message=step.description)
        logger.debug(f"[{flow.id}] {step.name} started")
        # From here on the stored copy is no longer freshly planned
        await self._persist(flow)

        ticker = self._start_ticker(flow, step)
        try:
            try:
                result = await action(flow)
            finally:
                await self._stop_ticker(ticker)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            step.fail(message, self.clock())
            logger.error(f"[{flow.id}] {step.name} failed: {message}")
            raise StepActionFailure(step.id, message) from e

        step.complete(result, self.clock())
        logger.info(f"[{flow.id}] {step.name}: {result}")
        self._emit(flow, "step_complete", step=step, message=result)

    def _start_ticker(self, flow: MigrationFlow, step: MigrationStep) -> "asyncio.Task[None]":
        self._active_tickers += 1
        return asyncio.ensure_future(self._tick_progress(flow, step))

    async def _stop_ticker(self, ticker: "asyncio.Task[None]") -> None:
        ticker.cancel()
        try:
            # wait() never raises the ticker's own CancelledError, so a
            # cancellation of the running task still propagates
            await asyncio.wait([ticker])
        finally:
            self._active_tickers -= 1
        if ticker.done() and not ticker.cancelled() and ticker.exception() is not None:
            logger.warning(f"Progress ticker stopped with an error: {ticker.exception()}")

    async def _tick_progress(self, flow: MigrationFlow, step: MigrationStep) -> None:
        while True:
            await self.scheduler.sleep(self.config.tick_interval)
            increment = self.progress_random.random() * self.config.tick_increment
            if step.advance(increment, self.config.progress_ceiling):
                self._emit(flow, "progress", step=step)
                await self._persist(flow)

    def _actions(self) -> Dict[str, StepAction]:
        actions: Dict[str, StepAction] = {
            "open-source": self._open_source,
            "clone-and-convert": self._clone_and_convert,
            "name-and-create": self._name_and_create,
            "review-migrated-content": self._review_migrated_content,
            "reconfigure-settings": self._reconfigure_settings,
            "run-tests": self._run_tests,
            "deploy": self._deploy,
        }
        actions.update(self.action_overrides)
        return actions

    async def _simulate_latency(self, step_id: str) -> None:
        index = next(i for i, d in enumerate(STEP_PLAN) if d.id == step_id)
        await self.scheduler.sleep(self.config.step_delays[index])

    # Step actions

    async def _open_source(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("open-source")
        return f"Successfully connected to {flow.source.platform} ({flow.source.name})"

    async def _clone_and_convert(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("clone-and-convert")
        counts = []
        for collection in CAPABILITY_COLLECTIONS:
            cloned = list(flow.source.migratable_units(collection))
            setattr(flow.target, collection, cloned)
            counts.append(f"{len(cloned)} {COLLECTION_LABELS[collection]}")
        return "Cloned " + ", ".join(counts)

    async def _name_and_create(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("name-and-create")
        return f'Agent "{flow.target.name}" created successfully'

    async def _review_migrated_content(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("review-migrated-content")
        target = flow.target
        web_canvas = sum(1 for t in target.topics if t.type == TopicType.WEB_CANVAS)
        custom_entities = sum(1 for e in target.entities if e.type == EntityType.CUSTOM)

        delta = self.delta_engine.diff(flow.source, target)
        held_back = len(delta.removed)
        carried = len(delta.retained)

        fallback = (
            f"{target.name} carries over {carried} capability units from {flow.source.name}; "
            f"{held_back} require manual migration."
        )
        if self.text_generator is None:
            flow.summary = fallback
        else:
            prompt = (
                f"Summarize in 2-3 sentences the migration of the classic bot '{flow.source.name}' "
                f"into the AI agent '{target.name}'. Carried over: {sorted(delta.retained)}. "
                f"Held back for manual migration: {sorted(delta.removed)}."
            )
            flow.summary = await asyncio.to_thread(
                generate_or_fallback, self.text_generator, prompt, fallback
            )

        return (
            f"Migrated {web_canvas} web canvas topics and {custom_entities} custom entities; "
            f"{held_back} units held back for manual migration"
        )

    async def _reconfigure_settings(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("reconfigure-settings")
        flow.target.authorization = flow.source.authorization
        auth = flow.source.authorization.type.value if flow.source.authorization else "none"
        # Channel and skill settings depend on the deployment target and are
        # never carried over automatically.
        return (
            f"Security settings configured (authorization: {auth}). "
            "Manual reconfiguration required for channels and skills."
        )

    async def _run_tests(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("run-tests")
        flow.target.status = AgentStatus.TESTING

        probability = self.config.test_pass_probability
        flow.test_results = [
            CheckResult(name=name, passed=self.random.random() < probability)
            for name in TEST_BATTERY
        ]
        passed = sum(1 for r in flow.test_results if r.passed)
        total = len(flow.test_results)

        if passed < self.config.min_passing_checks:
            raise RuntimeError(f"Tests failed: {passed}/{total} passed")
        return f"Tests completed: {passed}/{total} passed"

    async def _deploy(self, flow: MigrationFlow) -> str:
        await self._simulate_latency("deploy")
        deployment_url = f"{self.config.deployment_base_url.rstrip('/')}/{self.id_generator()}"
        flow.target.deployment_url = deployment_url
        flow.target.status = AgentStatus.PUBLISHED
        flow.target.published_at = self.clock()
        return f"Agent deployed successfully at {deployment_url}"

    # Plumbing

    async def _persist(self, flow: MigrationFlow) -> None:
        """
        Save ``flow`` to the store.

        Stores flagged ``blocking_io`` are written from a worker thread. Each
        write gets a snapshot taken on the event loop and is chained after
        the previous write of the same flow, so writes land in order even
        when the caller (a progress ticker) is cancelled mid-write.
        """
        if self.store is None:
            return
        if not getattr(self.store, "blocking_io", False):
            self.store.put(flow.id, flow)
            return

        snapshot = MigrationFlow.from_dict(flow.to_dict())
        write = asyncio.ensure_future(self._write_after(self._writes.get(flow.id), snapshot))
        self._writes[flow.id] = write
        await asyncio.shield(write)

    async def _write_after(self, previous: Optional["asyncio.Task[None]"], snapshot: MigrationFlow) -> None:
        try:
            if previous is not None:
                await asyncio.wait([previous])
            await asyncio.to_thread(self.store.put, snapshot.id, snapshot)
        finally:
            if self._writes.get(snapshot.id) is asyncio.current_task():
                del self._writes[snapshot.id]

    def _emit(
        self,
        flow: MigrationFlow,
        event_type: str,
        step: Optional[MigrationStep] = None,
        message: Optional[str] = None,
        error: Optional[str] = None
    ) -> None:
        if not self.listeners:
            return
        event = ProgressEvent(
            type=event_type,
            flow_id=flow.id,
            flow_status=flow.status,
            step_id=step.id if step else None,
            step_name=step.name if step else None,
            step_status=step.status if step else None,
            progress=step.progress if step else flow.progress,
            message=message,
            error=error,
            timestamp=self.clock(),
        )
        for listener in self.listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Progress listener failed on {event_type}: {e}")
