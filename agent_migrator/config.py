"""Runtime configuration for the migrator."""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Simulated latency of each step, in seconds, in plan order.
DEFAULT_STEP_DELAYS: List[float] = [2.0, 3.0, 1.5, 2.5, 3.0, 4.0, 5.0]


@dataclass
class MigratorConfig:
    """Configuration for the orchestrator and the services around it."""

    # Simulated timing
    step_delays: List[float] = field(default_factory=lambda: list(DEFAULT_STEP_DELAYS))
    tick_interval: float = 0.2  # Seconds between progress ticks
    tick_increment: float = 20.0  # Max random progress gain per tick
    progress_ceiling: float = 90.0  # Ticks never push progress past this

    # Test battery
    test_pass_probability: float = 0.9
    min_passing_checks: int = 1  # Step fails below this many passing checks

    # Deployment
    deployment_base_url: str = "https://copilot.microsoft.com/agents"

    # Text generation (optional, best effort)
    llm_provider: str = "openai"  # openai, huggingface
    llm_model: str = "gpt-3.5-turbo"
    llm_api_key: Optional[str] = None
    llm_timeout: float = 30.0

    # Persistence
    store_dir: Optional[str] = None  # JSON file store; in-memory when unset

    def __post_init__(self):
        if len(self.step_delays) != len(DEFAULT_STEP_DELAYS):
            raise ValueError(
                f"step_delays needs {len(DEFAULT_STEP_DELAYS)} entries, got {len(self.step_delays)}"
            )
        if not 0.0 <= self.test_pass_probability <= 1.0:
            raise ValueError("test_pass_probability must be within [0, 1]")
        if not 0.0 < self.progress_ceiling < 100.0:
            raise ValueError("progress_ceiling must be within (0, 100)")

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (API key omitted)."""
        return {
            "step_delays": list(self.step_delays),
            "tick_interval": self.tick_interval,
            "tick_increment": self.tick_increment,
            "progress_ceiling": self.progress_ceiling,
            "test_pass_probability": self.test_pass_probability,
            "min_passing_checks": self.min_passing_checks,
            "deployment_base_url": self.deployment_base_url,
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "llm_timeout": self.llm_timeout,
            "store_dir": self.store_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigratorConfig":
        """Create from dictionary representation."""
        return cls(
            step_delays=list(data.get("step_delays", DEFAULT_STEP_DELAYS)),
            tick_interval=data.get("tick_interval", 0.2),
            tick_increment=data.get("tick_increment", 20.0),
            progress_ceiling=data.get("progress_ceiling", 90.0),
            test_pass_probability=data.get("test_pass_probability", 0.9),
            min_passing_checks=data.get("min_passing_checks", 1),
            deployment_base_url=data.get("deployment_base_url", "https://copilot.microsoft.com/agents"),
            llm_provider=data.get("llm_provider", "openai"),
            llm_model=data.get("llm_model", "gpt-3.5-turbo"),
            llm_api_key=data.get("llm_api_key"),
            llm_timeout=data.get("llm_timeout", 30.0),
            store_dir=data.get("store_dir"),
        )

    @classmethod
    def from_json_file(cls, path: str) -> "MigratorConfig":
        """Load configuration from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_env(cls, base: Optional[Dict[str, Any]] = None) -> "MigratorConfig":
        """
        Build configuration from environment variables.

        Args:
            base: Optional dictionary of settings applied before the environment

        Recognised variables: OPENAI_API_KEY, HUGGINGFACE_API_KEY,
        MIGRATOR_LLM_PROVIDER, MIGRATOR_LLM_MODEL, MIGRATOR_STORE_DIR,
        MIGRATOR_DEPLOYMENT_URL, MIGRATOR_TEST_PASS_PROBABILITY.
        """
        data = dict(base or {})

        provider = os.environ.get("MIGRATOR_LLM_PROVIDER", data.get("llm_provider", "openai"))
        data["llm_provider"] = provider
        if provider == "huggingface":
            data.setdefault("llm_api_key", os.environ.get("HUGGINGFACE_API_KEY"))
        else:
            data.setdefault("llm_api_key", os.environ.get("OPENAI_API_KEY"))

        if os.environ.get("MIGRATOR_LLM_MODEL"):
            data["llm_model"] = os.environ["MIGRATOR_LLM_MODEL"]
        if os.environ.get("MIGRATOR_STORE_DIR"):
            data["store_dir"] = os.environ["MIGRATOR_STORE_DIR"]
        if os.environ.get("MIGRATOR_DEPLOYMENT_URL"):
            data["deployment_base_url"] = os.environ["MIGRATOR_DEPLOYMENT_URL"]
        if os.environ.get("MIGRATOR_TEST_PASS_PROBABILITY"):
            data["test_pass_probability"] = float(os.environ["MIGRATOR_TEST_PASS_PROBABILITY"])

        return cls.from_dict(data)
