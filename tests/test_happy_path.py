# tests/test_happy_path.py

from fastapi.testclient import TestClient

from flowcraft.api.main import app
from conftest import SLACK_PROMPT

client = TestClient(app)


def test_happy_path(use_orchestrator, make_orchestrator, fake_engine):
    use_orchestrator(make_orchestrator(fake_engine))

    resp = client.post("/api/v1/workflow/generate", json={"prompt": SLACK_PROMPT})
    assert resp.status_code == 200
    data = resp.json()

    assert data["success"] is True
    assert data["execution_ready"] is True
    assert len(data["workflow"]["nodes"]) == 2
    assert len(data["workflow"]["edges"]) == 1
    assert {n["type"] for n in data["workflow"]["nodes"]} == {"trigger", "action"}
    assert fake_engine.calls == [{"prompt": SLACK_PROMPT, "blueprint": None}]

    # presentation text: present and shaped, wording not asserted
    assert isinstance(data["enthusiasm"], str) and data["enthusiasm"]
    assert "2 tools" in data["technical_summary"]
    assert set(data["insights"]) == {
        "complexity_analysis", "security_considerations", "performance_tips", "next_steps",
    }
    assert "project" in data


def test_progress_trail_is_ordered_and_ends_complete(use_orchestrator, make_orchestrator, fake_engine):
    use_orchestrator(make_orchestrator(fake_engine))

    data = client.post("/api/v1/workflow/generate", json={"prompt": SLACK_PROMPT}).json()
    updates = data["progress_updates"]

    assert [u["message"] for u in updates] == [
        "Analyzing...", "Researching...", "Generating...", "Workflow generation complete!",
    ]
    percentages = [u["percentage"] for u in updates]
    assert percentages == sorted(percentages)
    assert updates[-1]["phase"] == "complete"
    assert updates[-1]["percentage"] == 100


def test_success_without_workflow_defaults_to_empty_graph(use_orchestrator, make_orchestrator):
    from conftest import FakeEngine
    from flowcraft.core.models import GenerationResult

    engine = FakeEngine(result=GenerationResult(success=True), updates=[])
    use_orchestrator(make_orchestrator(engine))

    resp = client.post("/api/v1/workflow/generate", json={"prompt": "do something useful"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["workflow"] == {"nodes": [], "edges": []}
    assert data["execution_ready"] is True
    # zero engine updates: the orchestrator still reports completion once
    assert [u["phase"] for u in data["progress_updates"]] == ["complete"]
