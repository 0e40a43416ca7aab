"""Tests for flow stores."""

import pytest

from agent_migrator.services.storage import InMemoryStore, JsonFileStore


class TestInMemoryStore:

    def test_put_get_returns_same_object(self, orchestrator, source_bot) -> None:
        store = InMemoryStore()
        flow = orchestrator.plan(source_bot, "Agent")
        store.put(flow.id, flow)

        assert store.get(flow.id) is flow
        assert store.list_ids() == [flow.id]

    def test_missing(self) -> None:
        assert InMemoryStore().get("nope") is None

    def test_delete(self, orchestrator, source_bot) -> None:
        store = InMemoryStore()
        flow = orchestrator.plan(source_bot, "Agent")
        store.put(flow.id, flow)

        assert store.delete(flow.id)
        assert not store.delete(flow.id)
        assert store.get(flow.id) is None


class TestJsonFileStore:

    def test_put_get(self, orchestrator, source_bot, tmp_path) -> None:
        store = JsonFileStore(str(tmp_path / "flows"))
        flow = orchestrator.plan(source_bot, "Agent")
        store.put(flow.id, flow)

        loaded = store.get(flow.id)

        assert loaded is not flow
        assert loaded.to_dict() == flow.to_dict()
        assert loaded.is_fresh
        assert (tmp_path / "flows" / f"{flow.id}.json").exists()

    def test_list_and_delete(self, orchestrator, source_bot, tmp_path) -> None:
        store = JsonFileStore(str(tmp_path))
        first = orchestrator.plan(source_bot, "A")
        second = orchestrator.plan(source_bot, "B")
        store.put(first.id, first)
        store.put(second.id, second)

        assert store.list_ids() == sorted([first.id, second.id])
        assert store.delete(first.id)
        assert store.list_ids() == [second.id]

    def test_missing(self, tmp_path) -> None:
        assert JsonFileStore(str(tmp_path)).get("absent") is None

    @pytest.mark.parametrize("flow_id", ["../escape", "a/b", ""])
    def test_rejects_unsafe_ids(self, tmp_path, flow_id) -> None:
        store = JsonFileStore(str(tmp_path))
        with pytest.raises(ValueError):
            store.get(flow_id)
