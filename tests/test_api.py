"""Tests for the FastAPI surface."""

import pytest
from fastapi.testclient import TestClient

from agent_migrator.api import create_app
from agent_migrator.services.storage import InMemoryStore, JsonFileStore
from agent_migrator.services.text_generation import FALLBACK_SUMMARY


@pytest.fixture
def client(make_orchestrator) -> TestClient:
    app = create_app(orchestrator=make_orchestrator())
    return TestClient(app)


class TestBasics:

    def test_health(self, client) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_list_bots(self, client) -> None:
        data = client.get("/api/bots").json()

        assert data["total"] == 2
        bot = data["bots"][0]
        assert bot["id"] == "bot-1"
        assert bot["topics"] == 3
        assert bot["total_units"] == 11
        assert bot["migratable_units"] == 10


class TestMigrations:

    def test_create_and_run(self, client) -> None:
        response = client.post(
            "/api/migrations", json={"bot_id": "bot-1", "agent_name": "Support Agent"}
        )
        assert response.status_code == 200
        created = response.json()
        assert len(created["steps"]) == 7
        assert created["target"]["name"] == "Support Agent"

        flow = client.get(f"/api/migrations/{created['id']}").json()

        assert flow["status"] == "completed"
        assert flow["progress"] == 100
        assert flow["target"]["status"] == "published"
        assert flow["target"]["deployment_url"]
        assert [s["status"] for s in flow["steps"]] == ["completed"] * 7
        assert len(flow["test_results"]) == 6
        assert {t["id"] for t in flow["target"]["topics"]} == {"t1", "t2"}

    def test_create_without_start_then_start(self, client) -> None:
        created = client.post(
            "/api/migrations",
            json={"bot_id": "bot-2", "agent_name": "Sales Agent", "start": False},
        ).json()
        migration_id = created["id"]

        pending = client.get(f"/api/migrations/{migration_id}").json()
        assert pending["status"] == "initializing"
        assert all(s["status"] == "pending" for s in pending["steps"])

        started = client.post(f"/api/migrations/{migration_id}/start")
        assert started.status_code == 200
        assert started.json() == {"status": "started", "migration_id": migration_id}

        assert client.get(f"/api/migrations/{migration_id}").json()["status"] == "completed"

        again = client.post(f"/api/migrations/{migration_id}/start")
        assert again.status_code == 409

    def test_list_migrations(self, client) -> None:
        client.post("/api/migrations", json={"bot_id": "bot-1", "agent_name": "A", "start": False})
        client.post("/api/migrations", json={"bot_id": "bot-2", "agent_name": "B", "start": False})

        data = client.get("/api/migrations").json()
        assert data["total"] == 2
        assert {m["target"]["name"] for m in data["migrations"]} == {"A", "B"}

    def test_unknown_bot(self, client) -> None:
        response = client.post("/api/migrations", json={"bot_id": "bot-9", "agent_name": "X"})
        assert response.status_code == 404

    def test_blank_agent_name(self, client) -> None:
        response = client.post("/api/migrations", json={"bot_id": "bot-1", "agent_name": "  "})
        assert response.status_code == 422

    def test_unknown_migration(self, client) -> None:
        assert client.get("/api/migrations/missing").status_code == 404
        assert client.post("/api/migrations/missing/start").status_code == 404

    def test_migration_delta(self, client) -> None:
        created = client.post(
            "/api/migrations", json={"bot_id": "bot-1", "agent_name": "Support Agent"}
        ).json()

        delta = client.get(f"/api/migrations/{created['id']}/delta").json()

        assert delta["removed"] == ["t3"]
        assert delta["added"] == []
        assert "t1" in delta["retained"]


class TestDeltaScenario:

    def test_default_scenario(self, client) -> None:
        data = client.get("/api/delta").json()

        assert data["classic"]["id"] == "classic-1"
        assert data["agent"]["id"] == "agent-1"
        assert data["delta"]["added"] == ["Outlook", "email_summary", "proactive_reminders"]
        assert data["summary"] == FALLBACK_SUMMARY

    def test_selected_scenario(self, client) -> None:
        data = client.get("/api/delta", params={"classic_id": "classic-2"}).json()

        assert data["classic"]["name"] == "IT Helpdesk Bot"
        assert "Power Automate" in data["delta"]["added"]
        assert data["delta"]["new_capabilities"] == ["Predictive analytics", "Workflow automation"]


class TestStores:

    def test_plan_written_once(self, make_orchestrator) -> None:

        class CountingStore(InMemoryStore):
            def __init__(self):
                super().__init__()
                self.puts = 0

            def put(self, flow_id, record):
                self.puts += 1
                super().put(flow_id, record)

        store = CountingStore()
        client = TestClient(create_app(orchestrator=make_orchestrator(store=store)))

        response = client.post(
            "/api/migrations", json={"bot_id": "bot-1", "agent_name": "A", "start": False}
        )

        assert response.status_code == 200
        assert store.puts == 1

    def test_orchestrator_file_store_is_served(self, make_orchestrator, tmp_path) -> None:
        store = JsonFileStore(str(tmp_path))
        app = create_app(orchestrator=make_orchestrator(store=store))
        client = TestClient(app)

        assert app.state.store is store

        created = client.post(
            "/api/migrations", json={"bot_id": "bot-1", "agent_name": "Support Agent"}
        ).json()
        flow = client.get(f"/api/migrations/{created['id']}").json()

        assert flow["status"] == "completed"
        assert (tmp_path / f"{created['id']}.json").exists()
        assert client.post(f"/api/migrations/{created['id']}/start").status_code == 409
