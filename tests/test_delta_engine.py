"""Tests for CapabilityDeltaEngine."""

import pytest

from agent_migrator.exceptions import InvalidFlowState
from agent_migrator.models.delta import CapabilityDelta, CapabilityProfile
from agent_migrator.services.delta_engine import CapabilityDeltaEngine
from agent_migrator.services.demo_data import delta_scenario, get_classic_bot
from agent_migrator.services.text_generation import FALLBACK_SUMMARY, StaticTextGenerator


class Collections:
    """Minimal object exposing capability_sets()."""

    def __init__(self, sets, declared=None):
        self._sets = sets
        if declared is not None:
            self.declared_capabilities = declared

    def capability_sets(self):
        return self._sets


@pytest.fixture
def engine() -> CapabilityDeltaEngine:
    return CapabilityDeltaEngine()


class TestDiff:

    def test_added_retained_removed(self, engine) -> None:
        source = CapabilityProfile("s", "Source", skills=("A", "B"))
        target = CapabilityProfile("t", "Target", skills=("B", "C", "D"))

        delta = engine.diff(source, target)

        assert delta.added == {"C", "D"}
        assert delta.retained == {"B"}
        assert delta.removed == {"A"}

    def test_partition_of_union(self, engine) -> None:
        source = Collections({"skills": ["a", "b", "c"], "integrations": ["Teams"]})
        target = Collections({"skills": ["b", "c", "d"], "integrations": ["Teams", "Outlook"]})

        delta = engine.diff(source, target)

        assert delta.retained | delta.removed == {"a", "b", "c", "Teams"}
        assert delta.retained | delta.added == {"b", "c", "d", "Teams", "Outlook"}
        assert not (delta.added & delta.retained)
        assert not (delta.removed & delta.retained)
        assert not (delta.added & delta.removed)

    def test_by_category_holds_added_ids(self, engine) -> None:
        source = Collections({"skills": ["a"], "integrations": ["Teams"]})
        target = Collections({"skills": ["a", "b"], "integrations": ["Teams", "Outlook"]})

        delta = engine.diff(source, target)

        assert delta.by_category == {"integrations": {"Outlook"}, "skills": {"b"}}

    def test_category_only_on_one_side(self, engine) -> None:
        source = Collections({"skills": ["a"]})
        target = Collections({"skills": ["a"], "plugins": ["p"]})

        delta = engine.diff(source, target)

        assert delta.added == {"p"}
        assert delta.by_category["plugins"] == {"p"}

    def test_new_capabilities_passed_through(self, engine) -> None:
        source = CapabilityProfile("s", "Source", skills=("A",))
        target = CapabilityProfile("t", "Target", skills=("A", "C"), new_capabilities=("C", "C"))

        delta = engine.diff(source, target)

        assert delta.added == {"C"}
        assert delta.new_capabilities == ("C", "C")

    def test_no_declared_capabilities(self, engine) -> None:
        delta = engine.diff(Collections({"skills": []}), Collections({"skills": ["x"]}))
        assert delta.new_capabilities == ()

    def test_idempotent_and_pure(self, engine) -> None:
        source = CapabilityProfile("s", "Source", skills=("A", "B"), integrations=("Teams",))
        target = CapabilityProfile("t", "Target", skills=("B", "C"), new_capabilities=("X",))

        first = engine.diff(source, target)
        second = engine.diff(source, target)

        assert first == second
        assert source.skills == ("A", "B")
        assert target.skills == ("B", "C")

    def test_identical_sides_have_no_changes(self, engine) -> None:
        profile = CapabilityProfile("p", "Same", skills=("A",))
        delta = engine.diff(profile, profile)
        assert not delta.has_changes
        assert delta.retained == {"A"}

    def test_source_against_planned_target(self, orchestrator, source_bot) -> None:
        flow = orchestrator.plan(source_bot, "Support Agent")
        delta = CapabilityDeltaEngine().diff(flow.source, flow.target)

        assert delta.added == frozenset()
        assert delta.retained == frozenset()
        assert "t1" in delta.removed
        assert "t3" in delta.removed

    def test_demo_bot_self_comparison(self, engine) -> None:
        bot = get_classic_bot("bot-1")
        delta = engine.diff(bot, bot)
        assert "t3" in delta.retained
        assert not delta.added


class TestMalformedInput:

    def test_missing_source(self, engine) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(None, CapabilityProfile("t", "Target"))

    def test_missing_target(self, engine) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(CapabilityProfile("s", "Source"), None)

    def test_no_capability_collections(self, engine) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(object(), CapabilityProfile("t", "Target"))

    def test_non_mapping_collections(self, engine) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(Collections(["A", "B"]), CapabilityProfile("t", "Target"))

    @pytest.mark.parametrize("bad", [None, "skill", 42])
    def test_malformed_category(self, engine, bad) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(Collections({"skills": bad}), CapabilityProfile("t", "Target"))

    def test_unhashable_identifiers(self, engine) -> None:
        with pytest.raises(InvalidFlowState):
            engine.diff(Collections({"skills": [["nested"]]}), CapabilityProfile("t", "Target"))

    def test_declared_capabilities_string(self, engine) -> None:
        target = Collections({"skills": ["a"]}, declared="Proactive reminders")
        with pytest.raises(InvalidFlowState):
            engine.diff(Collections({"skills": ["a"]}), target)


class TestScenarios:

    def test_hr_scenario(self, engine) -> None:
        classic, agent = delta_scenario("classic-1")
        delta = engine.diff(classic, agent)

        assert delta.added == {"proactive_reminders", "email_summary", "Outlook"}
        assert delta.retained == {"leave_balance", "policy_info", "Teams"}
        assert delta.removed == frozenset()
        assert delta.new_capabilities == ("Proactive reminders", "Email summarization")

    def test_it_scenario(self, engine) -> None:
        classic, agent = delta_scenario("classic-2")
        delta = engine.diff(classic, agent)

        assert delta.added == {"predictive_analytics", "workflow_automation", "Power Automate"}

    def test_unknown_scenario_falls_back(self) -> None:
        classic, agent = delta_scenario("missing")
        assert classic.id == "classic-1"
        assert agent.id == "agent-1"

    def test_to_dict_sorted(self, engine) -> None:
        classic, agent = delta_scenario("classic-1")
        data = engine.diff(classic, agent).to_dict()
        assert data["added"] == ["Outlook", "email_summary", "proactive_reminders"]
        assert data["by_category"]["integrations"] == ["Outlook"]


class TestSummarize:

    def test_fallback_without_generator(self, engine) -> None:
        classic, agent = delta_scenario()
        assert engine.summarize(classic, agent) == FALLBACK_SUMMARY

    def test_uses_generator(self) -> None:
        generator = StaticTextGenerator("The agent adds proactive reminders.")
        engine = CapabilityDeltaEngine(generator)
        classic, agent = delta_scenario()

        assert engine.summarize(classic, agent) == "The agent adds proactive reminders."
        assert "HR FAQ Bot" in generator.prompts[0]
        assert "proactive_reminders" in generator.prompts[0]

    def test_failing_generator_falls_back(self) -> None:

        class Broken:
            def generate(self, prompt):
                raise RuntimeError("timeout")

        engine = CapabilityDeltaEngine(Broken())
        classic, agent = delta_scenario()
        assert engine.summarize(classic, agent) == FALLBACK_SUMMARY

    def test_reuses_given_delta(self) -> None:
        generator = StaticTextGenerator("ok")
        engine = CapabilityDeltaEngine(generator)
        classic, agent = delta_scenario()
        delta = CapabilityDelta(added=frozenset({"sentinel"}))

        engine.summarize(classic, agent, delta)
        assert "sentinel" in generator.prompts[0]
