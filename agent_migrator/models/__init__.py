"""Data models for the migration core."""

from .configuration import (
    AgentStatus,
    Authorization,
    AuthorizationType,
    AutomationFlow,
    CAPABILITY_COLLECTIONS,
    Channel,
    ChannelType,
    ComponentType,
    CustomComponent,
    Entity,
    EntityType,
    SkillReference,
    SourceConfiguration,
    TargetConfiguration,
    Topic,
    TopicType,
)
from .migration import (
    CheckResult,
    FlowStatus,
    MigrationFlow,
    MigrationStep,
    PHASE_AFTER_STEP,
    StepStatus,
)
from .delta import (
    CapabilityDelta,
    CapabilityProfile,
)

__all__ = [
    "AgentStatus",
    "Authorization",
    "AuthorizationType",
    "AutomationFlow",
    "CAPABILITY_COLLECTIONS",
    "Channel",
    "ChannelType",
    "ComponentType",
    "CustomComponent",
    "Entity",
    "EntityType",
    "SkillReference",
    "SourceConfiguration",
    "TargetConfiguration",
    "Topic",
    "TopicType",
    "CheckResult",
    "FlowStatus",
    "MigrationFlow",
    "MigrationStep",
    "PHASE_AFTER_STEP",
    "StepStatus",
    "CapabilityDelta",
    "CapabilityProfile",
]
