# tests/test_openai_engine.py

import httpx
import openai
import pytest

from flowcraft.core.config import GeneratorConfig
from flowcraft.core.errors import ConfigurationError, EngineError
from flowcraft.integrations.llm_client import LLMClient
from flowcraft.integrations.openai_engine import OpenAIWorkflowEngine, create_engine, parse_workflow

DISCOVERY = {"summary": "sheet to slack", "requiredIntegrations": ["google_sheets", "slack"], "complexity": "simple"}
RESEARCH = {"integrations": [{"serviceName": "slack", "authentication": "oauth2", "operations": ["post_message"]}]}
WORKFLOW = {
    "workflow": {
        "nodes": [
            {"id": "n1", "type": "trigger", "data": {"label": "New Row", "service": "google_sheets"}},
            {"id": "n2", "type": "notify", "data": {"label": "Post", "service": "slack"}},
        ],
        "edges": [{"source": "n1", "target": "n2"}, {"source": "n2"}],
    },
    "project": {"name": "Sheet alerts", "complexity": "tiny"},
}


def _engine(monkeypatch, replies):
    llm = LLMClient(api_key="sk-test")
    prompts = []

    async def fake_chat_json(prompt, system=None):
        prompts.append(prompt)
        reply = replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    monkeypatch.setattr(llm, "chat_json", fake_chat_json)
    return OpenAIWorkflowEngine(llm), prompts


@pytest.mark.asyncio
async def test_generate_runs_tool_chain(monkeypatch):
    engine, prompts = _engine(monkeypatch, [DISCOVERY, RESEARCH, WORKFLOW])
    updates = []

    result = await engine.generate("sheet rows to slack", on_progress=updates.append, blueprint="Post rows.")

    assert result.success
    assert result.metadata.tools_used == ["performDeepDiscovery", "researchIntegrations", "generateWorkflow"]
    assert [n.type for n in result.workflow.nodes] == ["trigger", "action"]
    assert len(result.workflow.edges) == 1
    assert result.project.complexity == "standard"
    assert result.project.integrations[0].service_name == "slack"
    assert 'Approved blueprint: "Post rows."' in prompts[0]
    assert [u["phase"] for u in updates] == ["analyzing", "researching", "generating", "complete"]


@pytest.mark.asyncio
async def test_auth_error_is_reported_as_configuration(monkeypatch):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    auth_error = openai.AuthenticationError("Incorrect API key provided", response=httpx.Response(401, request=request), body=None)
    engine, _ = _engine(monkeypatch, [auth_error])

    result = await engine.generate("anything")

    assert result.success is False
    assert result.error_kind == "configuration"
    assert result.metadata.tools_used == []


@pytest.mark.asyncio
async def test_malformed_output_is_reported_as_engine_failure(monkeypatch):
    engine, _ = _engine(monkeypatch, [DISCOVERY, RESEARCH, EngineError("Malformed model output: expected a JSON object")])

    result = await engine.generate("anything")

    assert result.success is False
    assert result.error_kind == "engine"
    assert "Malformed" in result.error
    assert result.metadata.tools_used == ["performDeepDiscovery", "researchIntegrations"]


@pytest.mark.asyncio
async def test_analyze_builds_blueprint(monkeypatch):
    engine, _ = _engine(monkeypatch, [{
        "blueprint": "Post new rows to Slack.",
        "assumptions": ["Sheet is shared"],
        "suggestedNodes": [{"id": "n1", "type": "trigger", "data": {"label": "New Row"}}],
    }])

    analysis = await engine.analyze("sheet rows to slack")

    assert analysis.blueprint == "Post new rows to Slack."
    assert analysis.suggested_nodes[0].id == "n1"
    assert analysis.recommendations == []


def test_parse_workflow_without_workflow_key():
    assert parse_workflow({"something": "else"}) is None


def test_llm_client_requires_key():
    with pytest.raises(ConfigurationError):
        LLMClient(api_key="")


def test_create_engine_uses_config():
    engine = create_engine(GeneratorConfig.from_env({"OPENAI_API_KEY": "sk-x", "FLOWCRAFT_MODEL": "gpt-4o-mini"}))
    assert isinstance(engine, OpenAIWorkflowEngine)
    assert engine.llm.model == "gpt-4o-mini"
