"""Service layer for the migrator."""

from .delta_engine import CapabilityDeltaEngine
from .storage import FlowStore, InMemoryStore, JsonFileStore
from .text_generation import TextGenerationService, generate_or_fallback

__all__ = [
    "CapabilityDeltaEngine",
    "FlowStore",
    "InMemoryStore",
    "JsonFileStore",
    "TextGenerationService",
    "generate_or_fallback",
]
