"""
Agent Migrator

Simulates migrating classic rule-based chatbots to AI-powered agents.

Supports:
- A seven-step, progress-tracked migration flow with per-step status
- Migratability filtering of topics, entities, flows, channels and components
- Capability deltas between a classic bot and its migrated agent
- Optional LLM-written summaries with canned fallbacks
- In-memory or JSON file persistence of flows
"""

__version__ = "0.1.0"
