"""Shared fixtures for the agent migrator test suite."""

from datetime import timedelta

import pytest

from agent_migrator.config import MigratorConfig
from agent_migrator.models.configuration import (
    Authorization,
    AuthorizationType,
    AutomationFlow,
    Channel,
    ChannelType,
    CustomComponent,
    Entity,
    EntityType,
    SkillReference,
    SourceConfiguration,
    Topic,
    TopicType,
)
from agent_migrator.orchestrator import MigrationOrchestrator
from agent_migrator.services.runtime import (
    ImmediateScheduler,
    ManualClock,
    ScriptedRandom,
    SequentialIds,
)


# ---------------------------------------------------------------------------
# Source configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def source_bot() -> SourceConfiguration:
    """3 topics (2 migratable), 2 entities, 2 flows, 2 channels (1 migratable)."""
    return SourceConfiguration(
        id="bot-test",
        name="Support Bot",
        description="Test bot",
        topics=(
            Topic("t1", "Greeting", type=TopicType.WEB_CANVAS),
            Topic("t2", "Orders", type=TopicType.CODE),
            Topic("t3", "Billing", type=TopicType.WEB_CANVAS, is_migratable=False),
        ),
        entities=(
            Entity("e1", "Product", EntityType.CUSTOM, ("item",)),
            Entity("e2", "Date", EntityType.PREBUILT),
        ),
        automation_flows=(
            AutomationFlow("f1", "Create Ticket", trigger="user_message", actions=("create_ticket",)),
            AutomationFlow("f2", "Notify Team", trigger="ticket_created", actions=("send_email",)),
        ),
        channels=(
            Channel("c1", "Teams", ChannelType.TEAMS),
            Channel("c2", "Email", ChannelType.EMAIL, is_migratable=False),
        ),
        authorization=Authorization(AuthorizationType.OAUTH, {"scope": "bot"}),
        skills=(
            SkillReference("s1", "Calendar", "https://calendar.example.com", "app-1"),
        ),
        custom_components=(
            CustomComponent("cc1", "CRM", endpoint="https://crm.example.com"),
        ),
    )


# ---------------------------------------------------------------------------
# Runtime doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler() -> ImmediateScheduler:
    return ImmediateScheduler()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(step=timedelta(seconds=1))


@pytest.fixture
def make_orchestrator(scheduler, clock):
    """Factory for orchestrators wired with deterministic collaborators."""

    def _make(**kwargs) -> MigrationOrchestrator:
        kwargs.setdefault("config", MigratorConfig())
        kwargs.setdefault("id_generator", SequentialIds("id"))
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("scheduler", scheduler)
        kwargs.setdefault("random_source", ScriptedRandom([0.0]))
        kwargs.setdefault("progress_random", ScriptedRandom([0.5]))
        return MigrationOrchestrator(**kwargs)

    return _make


@pytest.fixture
def orchestrator(make_orchestrator) -> MigrationOrchestrator:
    return make_orchestrator()
