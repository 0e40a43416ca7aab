"""Command-line interface for the agent migrator."""

import argparse
import asyncio
import json
import logging
import sys

from .config import MigratorConfig
from .orchestrator import MigrationOrchestrator, ProgressEvent
from .services.delta_engine import CapabilityDeltaEngine
from .services.demo_data import delta_scenario, get_classic_bot, list_classic_bots
from .services.runtime import ImmediateScheduler, default_random
from .services.storage import JsonFileStore
from .services.text_generation import TextGenerationService

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Agent Migrator - Migrate classic chatbots to AI agents"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--config", help="Path to a JSON configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List bots
    subparsers.add_parser("bots", help="List classic bots available for migration")

    # Run migration
    migrate_parser = subparsers.add_parser("migrate", help="Migrate a classic bot")
    migrate_parser.add_argument("--bot", required=True, help="ID of the classic bot")
    migrate_parser.add_argument("--name", required=True, help="Name of the new agent")
    migrate_parser.add_argument("--fast", action="store_true", help="Skip simulated latency")
    migrate_parser.add_argument("--seed", type=int, help="Seed for simulated test outcomes")
    migrate_parser.add_argument("--output", help="Write the final flow as JSON to this file")

    # Delta scenario
    delta_parser = subparsers.add_parser("delta", help="Show what a migrated agent adds")
    delta_parser.add_argument("--classic", help="ID of the classic profile (e.g. classic-1)")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    base = {}
    if args.config:
        base = MigratorConfig.from_json_file(args.config).to_dict()
    config = MigratorConfig.from_env(base)

    if args.command == "bots":
        return run_list_bots()
    elif args.command == "migrate":
        return run_migrate(args, config)
    elif args.command == "delta":
        return run_delta(args, config)
    else:
        parser.print_help()
        return 1


def _text_generator(config: MigratorConfig):
    if not config.llm_enabled:
        return None
    return TextGenerationService(
        api_key=config.llm_api_key,
        model=config.llm_model,
        provider=config.llm_provider,
        timeout=config.llm_timeout,
    )


def run_list_bots() -> int:
    """Print the classic bots."""
    print("\n=== Classic Bots ===")
    for bot in list_classic_bots():
        print(f"\n{bot.id}: {bot.name}")
        print(f"   {bot.description}")
        print(
            f"   Topics: {len(bot.topics)}, Entities: {len(bot.entities)}, "
            f"Flows: {len(bot.automation_flows)}, Channels: {len(bot.channels)}"
        )
    return 0


def _print_event(event: ProgressEvent) -> None:
    if event.type == "step_complete":
        print(f"  [done] {event.step_name}: {event.message}")
    elif event.type == "error":
        print(f"  [fail] {event.step_name}: {event.error}")


def run_migrate(args, config: MigratorConfig) -> int:
    """Run one migration end to end."""
    bot = get_classic_bot(args.bot)
    if not bot:
        print(f"Bot not found: {args.bot}")
        return 1

    text_generator = _text_generator(config)
    orchestrator = MigrationOrchestrator(
        config=config,
        scheduler=ImmediateScheduler() if args.fast else None,
        random_source=default_random(args.seed) if args.seed is not None else None,
        text_generator=text_generator,
        delta_engine=CapabilityDeltaEngine(text_generator),
        store=JsonFileStore(config.store_dir) if config.store_dir else None,
        listeners=[_print_event],
    )

    print(f"\nMigrating {bot.name} -> {args.name}")
    flow = asyncio.run(orchestrator.migrate(bot, args.name))

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" if flow.status.value == "completed" else "MIGRATION FAILED")
    print("=" * 60)
    print(f"Flow: {flow.id}")
    print(f"Status: {flow.status.value}")
    print(f"Agent status: {flow.target.status.value}")
    if flow.target.deployment_url:
        print(f"Deployment: {flow.target.deployment_url}")
    if flow.summary:
        print(f"Summary: {flow.summary}")
    if flow.duration_seconds is not None:
        print(f"Duration: {flow.duration_seconds:.2f} seconds")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(flow.to_dict(), f, indent=2, default=str)
        print(f"Flow saved to {args.output}")

    return 0 if flow.status.value == "completed" else 2


def run_delta(args, config: MigratorConfig) -> int:
    """Print the capability delta of a demo scenario."""
    classic, agent = delta_scenario(args.classic)
    engine = CapabilityDeltaEngine(_text_generator(config))
    delta = engine.diff(classic, agent)

    output = {
        "classic": classic.name,
        "agent": agent.name,
        "delta": delta.to_dict(),
        "summary": engine.summarize(classic, agent, delta),
    }
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
