# tests/test_streaming.py

import json

from fastapi.testclient import TestClient

from flowcraft.api.main import app
from conftest import FakeEngine, SLACK_PROMPT

client = TestClient(app)


def _events(body: str) -> list:
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def test_stream_emits_progress_then_result(use_orchestrator, make_orchestrator, fake_engine):
    use_orchestrator(make_orchestrator(fake_engine))

    resp = client.post("/api/v1/workflow/generate/stream", json={"prompt": SLACK_PROMPT})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")

    events = _events(resp.text)
    progress = [e for e in events if e["event"] == "progress"]
    assert [e["event"] for e in events] == ["progress"] * len(progress) + ["result"]
    assert [e["loading_phase"] for e in progress] == ["analyzing", "planning", "generating", "connecting"]
    assert progress[-1]["percentage"] == 100

    result = events[-1]
    assert result["status_code"] == 200
    assert len(result["envelope"]["workflow"]["nodes"]) == 2


def test_stream_carries_failure_envelope(use_orchestrator, make_orchestrator):
    use_orchestrator(make_orchestrator(FakeEngine(error=RuntimeError("boom"))))

    events = _events(client.post("/api/v1/workflow/generate/stream", json={"prompt": SLACK_PROMPT}).text)

    assert events[-1]["event"] == "result"
    assert events[-1]["status_code"] == 500
    assert events[-1]["envelope"]["error"] == "boom"


def test_stream_validates_prompt_before_streaming(use_orchestrator, make_orchestrator, fake_engine):
    use_orchestrator(make_orchestrator(fake_engine))

    resp = client.post("/api/v1/workflow/generate/stream", json={"prompt": ""})
    assert resp.status_code == 400
    assert fake_engine.calls == []
