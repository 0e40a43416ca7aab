"""Bot configuration models: capability units, source bots and target agents."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from dateutil import parser as date_parser

from ..exceptions import InvalidFlowState


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 text for an optional datetime."""
    return value.isoformat() if value else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 (or similar) timestamp, passing datetimes through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return date_parser.isoparse(str(value))


class TopicType(str, Enum):
    """Authoring style of a topic."""
    WEB_CANVAS = "web-canvas"
    CODE = "code"
    FALLBACK = "fallback"


class EntityType(str, Enum):
    """Origin of an entity definition."""
    CUSTOM = "custom"
    SYSTEM = "system"
    PREBUILT = "prebuilt"


class ChannelType(str, Enum):
    """Delivery channel of a bot."""
    TEAMS = "teams"
    WEB = "web"
    MOBILE = "mobile"
    EMAIL = "email"


class AuthorizationType(str, Enum):
    """How users are authenticated against the bot."""
    AZURE_AD = "azure-ad"
    API_KEY = "api-key"
    OAUTH = "oauth"


class ComponentType(str, Enum):
    """Kind of custom component a bot calls out to."""
    API = "api"
    SERVICE = "service"
    DATABASE = "database"


class AgentStatus(str, Enum):
    """Lifecycle status of a produced agent."""
    DRAFT = "draft"
    TESTING = "testing"
    PUBLISHED = "published"
    ERROR = "error"


@dataclass(frozen=True)
class Topic:
    """A conversation topic."""
    id: str
    name: str
    description: str = ""
    type: TopicType = TopicType.WEB_CANVAS
    content: str = ""
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "content": self.content,
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Topic":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            type=TopicType(data.get("type", "web-canvas")),
            content=data.get("content", ""),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class Entity:
    """A recognised entity with its synonyms."""
    id: str
    name: str
    type: EntityType = EntityType.CUSTOM
    synonyms: Tuple[str, ...] = ()
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "synonyms": list(self.synonyms),
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=EntityType(data.get("type", "custom")),
            synonyms=tuple(data.get("synonyms", ())),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class AutomationFlow:
    """An automation flow triggered from the bot (e.g. a Power Automate flow)."""
    id: str
    name: str
    description: str = ""
    trigger: str = ""
    actions: Tuple[str, ...] = ()
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "trigger": self.trigger,
            "actions": list(self.actions),
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutomationFlow":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            trigger=data.get("trigger", ""),
            actions=tuple(data.get("actions", ())),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class Channel:
    """A channel the bot is published to."""
    id: str
    name: str
    type: ChannelType = ChannelType.WEB
    configuration: Dict[str, Any] = field(default_factory=dict, compare=False)
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "configuration": dict(self.configuration),
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=ChannelType(data.get("type", "web")),
            configuration=dict(data.get("configuration") or {}),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class Authorization:
    """Authorization descriptor, carried over as-is."""
    type: AuthorizationType = AuthorizationType.AZURE_AD
    configuration: Dict[str, Any] = field(default_factory=dict, compare=False)
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "configuration": dict(self.configuration),
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Authorization":
        return cls(
            type=AuthorizationType(data.get("type", "azure-ad")),
            configuration=dict(data.get("configuration") or {}),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class SkillReference:
    """A reference to an externally hosted skill."""
    id: str
    name: str
    endpoint: str = ""
    app_id: str = ""
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "endpoint": self.endpoint,
            "app_id": self.app_id,
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SkillReference":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            endpoint=data.get("endpoint", ""),
            app_id=data.get("app_id", ""),
            is_migratable=data.get("is_migratable", True),
        )


@dataclass(frozen=True)
class CustomComponent:
    """A custom integration (API, service or database) used by the bot."""
    id: str
    name: str
    type: ComponentType = ComponentType.API
    endpoint: str = ""
    configuration: Dict[str, Any] = field(default_factory=dict, compare=False)
    is_migratable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "endpoint": self.endpoint,
            "configuration": dict(self.configuration),
            "is_migratable": self.is_migratable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomComponent":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=ComponentType(data.get("type", "api")),
            endpoint=data.get("endpoint", ""),
            configuration=dict(data.get("configuration") or {}),
            is_migratable=data.get("is_migratable", True),
        )


# Collection attribute name -> unit class. Order is the reporting order.
CAPABILITY_COLLECTIONS = {
    "topics": Topic,
    "entities": Entity,
    "automation_flows": AutomationFlow,
    "channels": Channel,
    "skills": SkillReference,
    "custom_components": CustomComponent,
}


def _capability_sets(config: Any) -> Dict[str, FrozenSet[str]]:
    return {
        name: frozenset(unit.id for unit in getattr(config, name))
        for name in CAPABILITY_COLLECTIONS
    }


def _units_to_dict(config: Any) -> Dict[str, List[Dict[str, Any]]]:
    return {
        name: [unit.to_dict() for unit in getattr(config, name)]
        for name in CAPABILITY_COLLECTIONS
    }


def _units_from_dict(data: Dict[str, Any]) -> Dict[str, Tuple[Any, ...]]:
    return {
        name: tuple(unit_cls.from_dict(item) for item in data.get(name) or [])
        for name, unit_cls in CAPABILITY_COLLECTIONS.items()
    }


@dataclass(frozen=True)
class SourceConfiguration:
    """
    Read-only snapshot of a classic bot being migrated.

    Created once at ingestion time and never mutated; the orchestrator only
    borrows it.
    """
    id: str
    name: str
    description: str = ""
    topics: Tuple[Topic, ...] = ()
    entities: Tuple[Entity, ...] = ()
    automation_flows: Tuple[AutomationFlow, ...] = ()
    channels: Tuple[Channel, ...] = ()
    authorization: Optional[Authorization] = None
    skills: Tuple[SkillReference, ...] = ()
    custom_components: Tuple[CustomComponent, ...] = ()

    # Metadata
    platform: str = "copilot-studio"
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def capability_sets(self) -> Dict[str, FrozenSet[str]]:
        """Identifiers of every capability unit, per collection."""
        return _capability_sets(self)

    def migratable_units(self, collection: str) -> Tuple[Any, ...]:
        """Units of ``collection`` flagged as migratable."""
        if collection not in CAPABILITY_COLLECTIONS:
            raise ValueError(f"Unknown capability collection: {collection}")
        return tuple(unit for unit in getattr(self, collection) if unit.is_migratable)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "authorization": self.authorization.to_dict() if self.authorization else None,
            "platform": self.platform,
            "created_at": format_timestamp(self.created_at),
            "last_modified": format_timestamp(self.last_modified),
        }
        data.update(_units_to_dict(self))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceConfiguration":
        """Create from dictionary representation."""
        authorization = data.get("authorization")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            authorization=Authorization.from_dict(authorization) if authorization else None,
            platform=data.get("platform", "copilot-studio"),
            created_at=parse_timestamp(data.get("created_at")),
            last_modified=parse_timestamp(data.get("last_modified")),
            **_units_from_dict(data),
        )


@dataclass
class TargetConfiguration:
    """
    The AI agent produced by a migration.

    Starts empty in ``draft`` status and is filled in step by step. Once the
    owning flow reaches a terminal state it is sealed: collections become
    tuples and further assignments raise ``InvalidFlowState``.
    """
    id: str
    name: str
    source_id: str
    description: str = ""
    topics: List[Topic] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    automation_flows: List[AutomationFlow] = field(default_factory=list)
    channels: List[Channel] = field(default_factory=list)
    authorization: Optional[Authorization] = None
    skills: List[SkillReference] = field(default_factory=list)
    custom_components: List[CustomComponent] = field(default_factory=list)
    status: AgentStatus = AgentStatus.DRAFT
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    deployment_url: Optional[str] = None
    declared_capabilities: List[str] = field(default_factory=list)
    sealed: bool = field(default=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("sealed"):
            raise InvalidFlowState(f"Agent {self.id} is sealed; cannot set {name}")
        super().__setattr__(name, value)

    def seal(self) -> None:
        """Freeze the agent snapshot."""
        if self.sealed:
            return
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                super().__setattr__(f.name, tuple(value))
        super().__setattr__("sealed", True)

    def capability_sets(self) -> Dict[str, FrozenSet[str]]:
        """Identifiers of every capability unit, per collection."""
        return _capability_sets(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = {
            "id": self.id,
            "name": self.name,
            "source_id": self.source_id,
            "description": self.description,
            "authorization": self.authorization.to_dict() if self.authorization else None,
            "status": self.status.value,
            "created_at": format_timestamp(self.created_at),
            "published_at": format_timestamp(self.published_at),
            "deployment_url": self.deployment_url,
            "declared_capabilities": list(self.declared_capabilities),
        }
        data.update(_units_to_dict(self))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetConfiguration":
        """Create from dictionary representation. The result is never sealed."""
        authorization = data.get("authorization")
        units = {name: list(items) for name, items in _units_from_dict(data).items()}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            source_id=data.get("source_id", ""),
            description=data.get("description", ""),
            authorization=Authorization.from_dict(authorization) if authorization else None,
            status=AgentStatus(data.get("status", "draft")),
            created_at=parse_timestamp(data.get("created_at")),
            published_at=parse_timestamp(data.get("published_at")),
            deployment_url=data.get("deployment_url"),
            declared_capabilities=list(data.get("declared_capabilities") or []),
            **units,
        )
