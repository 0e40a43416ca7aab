"""Capability delta computation between a source and a target configuration."""

import json
import logging
from typing import Any, Dict, FrozenSet, Optional

from ..exceptions import InvalidFlowState
from ..models.delta import CapabilityDelta
from .text_generation import FALLBACK_SUMMARY, TextGenerator, generate_or_fallback

logger = logging.getLogger(__name__)


class CapabilityDeltaEngine:
    """
    Computes which capabilities were added, retained or removed.

    Works on anything exposing ``capability_sets()`` (a mapping of category
    name to a collection of identifiers): source bots, produced agents and
    capability profiles alike. Comparison is by identifier, category by
    category; the overall sets are the union across categories.
    """

    def __init__(self, text_generator: Optional[TextGenerator] = None):
        """
        Initialize the engine.

        Args:
            text_generator: Optional collaborator used by ``summarize``
        """
        self.text_generator = text_generator

    def diff(self, source: Any, target: Any) -> CapabilityDelta:
        """
        Compare ``source`` against ``target``.

        Args:
            source: Source configuration or profile
            target: Target configuration or profile

        Returns:
            CapabilityDelta. ``by_category`` holds the added identifiers of
            each category; ``new_capabilities`` is the target's declared list
            passed through unchanged.

        Raises:
            InvalidFlowState: if either side is missing or malformed
        """
        source_sets = self._capability_sets(source, "source")
        target_sets = self._capability_sets(target, "target")

        added = set()
        retained = set()
        removed = set()
        by_category: Dict[str, FrozenSet[str]] = {}

        for category in sorted(set(source_sets) | set(target_sets)):
            src = source_sets.get(category, frozenset())
            tgt = target_sets.get(category, frozenset())
            category_added = tgt - src
            added |= category_added
            retained |= src & tgt
            removed |= src - tgt
            by_category[category] = frozenset(category_added)

        return CapabilityDelta(
            added=frozenset(added),
            retained=frozenset(retained),
            removed=frozenset(removed),
            new_capabilities=self._declared_capabilities(target),
            by_category=by_category,
        )

    def summarize(self, source: Any, target: Any, delta: Optional[CapabilityDelta] = None) -> str:
        """
        Ask the text generator for a short business summary of the delta.

        Falls back to a canned message when no generator is configured or it
        is unavailable.
        """
        if delta is None:
            delta = self.diff(source, target)
        if self.text_generator is None:
            return FALLBACK_SUMMARY

        prompt = (
            "Compare the following classic bot and migrated agent. List the new skills, "
            "integrations, and capabilities, and summarize the business value in 2-3 sentences.\n\n"
            f"Classic Bot: {json.dumps(self._describe(source), indent=2, default=str)}\n\n"
            f"Migrated Agent: {json.dumps(self._describe(target), indent=2, default=str)}\n\n"
            f"Delta: {json.dumps(delta.to_dict(), indent=2)}"
        )
        return generate_or_fallback(self.text_generator, prompt)

    def _capability_sets(self, config: Any, side: str) -> Dict[str, FrozenSet[str]]:
        if config is None:
            raise InvalidFlowState(f"Missing {side} configuration")

        getter = getattr(config, "capability_sets", None)
        if not callable(getter):
            raise InvalidFlowState(f"{side} configuration has no capability collections")

        raw = getter()
        if not isinstance(raw, dict):
            raise InvalidFlowState(f"{side} capability collections must be a mapping")

        result = {}
        for category, identifiers in raw.items():
            if identifiers is None or isinstance(identifiers, (str, bytes)):
                raise InvalidFlowState(f"Malformed {side} collection: {category}")
            try:
                result[category] = frozenset(identifiers)
            except TypeError as e:
                raise InvalidFlowState(f"Malformed {side} collection {category}: {e}") from e
        return result

    def _declared_capabilities(self, target: Any):
        declared = getattr(target, "declared_capabilities", None) or ()
        if isinstance(declared, (str, bytes)):
            raise InvalidFlowState("Declared capabilities must be a list, not a string")
        return tuple(declared)

    def _describe(self, config: Any) -> Dict[str, Any]:
        to_dict = getattr(config, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return {k: sorted(v) for k, v in config.capability_sets().items()}
