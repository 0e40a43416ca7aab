"""Capability delta models."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple


@dataclass(frozen=True)
class CapabilityProfile:
    """
    A lightweight capability descriptor.

    Classic bots list their intents as ``skills``; migrated agents list the
    skills they expose plus any ``new_capabilities`` that have no classic
    counterpart at all.
    """
    id: str
    name: str
    skills: Tuple[str, ...] = ()
    integrations: Tuple[str, ...] = ()
    new_capabilities: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()

    @property
    def declared_capabilities(self) -> Tuple[str, ...]:
        return self.new_capabilities

    def capability_sets(self) -> Dict[str, FrozenSet[str]]:
        return {
            "skills": frozenset(self.skills),
            "integrations": frozenset(self.integrations),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "skills": list(self.skills),
            "integrations": list(self.integrations),
            "new_capabilities": list(self.new_capabilities),
            "limitations": list(self.limitations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CapabilityProfile":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            skills=tuple(data.get("skills") or data.get("intents") or ()),
            integrations=tuple(data.get("integrations") or ()),
            new_capabilities=tuple(data.get("new_capabilities") or ()),
            limitations=tuple(data.get("limitations") or ()),
        )


@dataclass(frozen=True)
class CapabilityDelta:
    """
    Set difference of capabilities between a source and a target.

    ``new_capabilities`` is the target's own declared list, passed through
    verbatim; it is deliberately not deduplicated against ``added``.
    """
    added: FrozenSet[str] = frozenset()
    retained: FrozenSet[str] = frozenset()
    removed: FrozenSet[str] = frozenset()
    new_capabilities: Tuple[str, ...] = ()
    by_category: Dict[str, FrozenSet[str]] = field(default_factory=dict, hash=False)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.new_capabilities)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (sets as sorted lists)."""
        return {
            "added": sorted(self.added),
            "retained": sorted(self.retained),
            "removed": sorted(self.removed),
            "new_capabilities": list(self.new_capabilities),
            "by_category": {k: sorted(v) for k, v in self.by_category.items()},
        }
