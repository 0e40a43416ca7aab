"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.configuration import AgentStatus
from ..models.migration import FlowStatus, StepStatus


# Request Models
class MigrationCreate(BaseModel):
    bot_id: str
    agent_name: str
    declared_capabilities: List[str] = Field(default_factory=list)
    start: bool = True  # Run immediately in the background


# Response Models
class BotSummary(BaseModel):
    id: str
    name: str
    description: str = ""
    platform: str = ""
    topics: int = 0
    entities: int = 0
    automation_flows: int = 0
    channels: int = 0
    migratable_units: int = 0
    total_units: int = 0


class BotListResponse(BaseModel):
    bots: List[BotSummary]
    total: int


class MigrationStepResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    status: StepStatus
    progress: float = 0.0
    details: str = ""
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class AgentResponse(BaseModel):
    id: str
    name: str
    source_id: str
    description: str = ""
    status: AgentStatus
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    deployment_url: Optional[str] = None
    topics: List[Dict[str, Any]] = Field(default_factory=list)
    entities: List[Dict[str, Any]] = Field(default_factory=list)
    automation_flows: List[Dict[str, Any]] = Field(default_factory=list)
    channels: List[Dict[str, Any]] = Field(default_factory=list)
    skills: List[Dict[str, Any]] = Field(default_factory=list)
    custom_components: List[Dict[str, Any]] = Field(default_factory=list)
    authorization: Optional[Dict[str, Any]] = None
    declared_capabilities: List[str] = Field(default_factory=list)


class CheckResultResponse(BaseModel):
    name: str
    passed: bool


class MigrationResponse(BaseModel):
    id: str
    status: FlowStatus
    progress: float = 0.0
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    source: Dict[str, Any]
    target: AgentResponse
    steps: List[MigrationStepResponse]
    test_results: List[CheckResultResponse] = Field(default_factory=list)
    summary: Optional[str] = None


class MigrationListResponse(BaseModel):
    migrations: List[MigrationResponse]
    total: int


class DeltaResponse(BaseModel):
    added: List[str]
    retained: List[str]
    removed: List[str]
    new_capabilities: List[str]
    by_category: Dict[str, List[str]] = Field(default_factory=dict)


class DeltaScenarioResponse(BaseModel):
    classic: Dict[str, Any]
    agent: Dict[str, Any]
    delta: DeltaResponse
    summary: str
