"""Migration execution models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import InvalidFlowState
from .configuration import (
    SourceConfiguration,
    TargetConfiguration,
    format_timestamp,
    parse_timestamp,
)


class StepStatus(str, Enum):
    """Status of a single migration step."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.COMPLETED, StepStatus.ERROR)


class FlowStatus(str, Enum):
    """Coarse phase of a migration flow."""
    INITIALIZING = "initializing"
    CLONING = "cloning"
    CONVERTING = "converting"
    CONFIGURING = "configuring"
    TESTING = "testing"
    DEPLOYING = "deploying"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FlowStatus.COMPLETED, FlowStatus.FAILED)


# Phase reached once the step at each index completes. Steps past the end
# of this table leave the phase unchanged.
PHASE_AFTER_STEP: Tuple[FlowStatus, ...] = (
    FlowStatus.CLONING,
    FlowStatus.CONVERTING,
    FlowStatus.CONFIGURING,
    FlowStatus.TESTING,
    FlowStatus.DEPLOYING,
)


@dataclass
class MigrationStep:
    """
    A single step in a migration flow.

    Status only moves forward (pending -> in-progress -> completed | error)
    and progress never decreases; progress is 100 exactly when the step is
    completed. The transition methods below enforce this.
    """
    id: str
    name: str = ""
    description: str = ""
    status: StepStatus = StepStatus.PENDING
    progress: float = 0.0
    details: str = ""
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def start(self, now: Optional[datetime] = None) -> None:
        """Move from pending to in-progress with progress reset to 0."""
        if self.status != StepStatus.PENDING:
            raise InvalidFlowState(f"Step {self.id} cannot start from status {self.status.value}")
        self.status = StepStatus.IN_PROGRESS
        self.progress = 0.0
        self.started_at = now

    def advance(self, amount: float, ceiling: float) -> bool:
        """
        Raise progress by ``amount`` without reaching ``ceiling``.

        Returns True if progress changed. Ignored once the step has settled.
        """
        if self.status != StepStatus.IN_PROGRESS or amount <= 0:
            return False
        ceiling = min(ceiling, 99.0)
        updated = min(self.progress + amount, ceiling)
        if updated <= self.progress:
            return False
        self.progress = updated
        return True

    def complete(self, details: str, now: Optional[datetime] = None) -> None:
        if self.status != StepStatus.IN_PROGRESS:
            raise InvalidFlowState(f"Step {self.id} cannot complete from status {self.status.value}")
        self.progress = 100.0
        self.status = StepStatus.COMPLETED
        self.details = details
        self.completed_at = now

    def fail(self, error: str, now: Optional[datetime] = None) -> None:
        if self.status != StepStatus.IN_PROGRESS:
            raise InvalidFlowState(f"Step {self.id} cannot fail from status {self.status.value}")
        self.status = StepStatus.ERROR
        self.error = error or "Unknown error"
        self.completed_at = now

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "progress": round(self.progress, 2),
            "details": self.details,
            "error": self.error,
            "started_at": format_timestamp(self.started_at),
            "completed_at": format_timestamp(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationStep":
        """Create from dictionary representation."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            status=StepStatus(data.get("status", "pending")),
            progress=float(data.get("progress", 0.0)),
            details=data.get("details", ""),
            error=data.get("error"),
            started_at=parse_timestamp(data.get("started_at")),
            completed_at=parse_timestamp(data.get("completed_at")),
        )


@dataclass
class CheckResult:
    """Outcome of one named check in the test battery."""
    name: str
    passed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "passed": self.passed}


@dataclass
class MigrationFlow:
    """One end-to-end migration attempt: the aggregate root."""
    id: str
    source: SourceConfiguration
    target: TargetConfiguration
    steps: Tuple[MigrationStep, ...]
    status: FlowStatus = FlowStatus.INITIALIZING
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Informational output of individual steps
    test_results: List[CheckResult] = field(default_factory=list)
    summary: Optional[str] = None

    @property
    def is_fresh(self) -> bool:
        """True when the flow is exactly as ``plan`` left it."""
        return (
            self.status == FlowStatus.INITIALIZING
            and self.completed_at is None
            and all(s.status == StepStatus.PENDING for s in self.steps)
        )

    @property
    def completed_steps(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)

    @property
    def failed_step(self) -> Optional[MigrationStep]:
        for step in self.steps:
            if step.status == StepStatus.ERROR:
                return step
        return None

    @property
    def progress(self) -> float:
        """Overall progress as the mean of step progress."""
        if not self.steps:
            return 0.0
        return sum(s.progress for s in self.steps) / len(self.steps)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.created_at and self.completed_at:
            return (self.completed_at - self.created_at).total_seconds()
        return None

    def get_step(self, step_id: str) -> Optional[MigrationStep]:
        """Get a step by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "steps": [s.to_dict() for s in self.steps],
            "status": self.status.value,
            "progress": round(self.progress, 2),
            "created_at": format_timestamp(self.created_at),
            "completed_at": format_timestamp(self.completed_at),
            "test_results": [r.to_dict() for r in self.test_results],
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationFlow":
        """Create from dictionary representation."""
        status = FlowStatus(data.get("status", "initializing"))
        target = TargetConfiguration.from_dict(data["target"])
        if status.is_terminal:
            target.seal()
        return cls(
            id=data["id"],
            source=SourceConfiguration.from_dict(data["source"]),
            target=target,
            steps=tuple(MigrationStep.from_dict(s) for s in data.get("steps", [])),
            status=status,
            created_at=parse_timestamp(data.get("created_at")),
            completed_at=parse_timestamp(data.get("completed_at")),
            test_results=[
                CheckResult(name=r["name"], passed=r["passed"])
                for r in data.get("test_results", [])
            ],
            summary=data.get("summary"),
        )
