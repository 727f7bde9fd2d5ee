# tests/conftest.py

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from flowcraft.agents.orchestrator import GenerationOrchestrator
from flowcraft.api.deps import get_orchestrator
from flowcraft.api.main import app
from flowcraft.core.config import GeneratorConfig
from flowcraft.core.engine import WorkflowEngine
from flowcraft.core.models import (
    AIAnalysis,
    Edge,
    GenerationMetadata,
    GenerationResult,
    Node,
    NodeData,
    Workflow,
)
from flowcraft.core.review_store import review_store

SLACK_PROMPT = "send me a Slack message when a new row is added to my spreadsheet"


def slack_sheet_result() -> GenerationResult:
    return GenerationResult(
        success=True,
        workflow=Workflow(
            nodes=[
                Node(id="trigger-1", type="trigger",
                     data=NodeData(label="New Spreadsheet Row", service="google_sheets")),
                Node(id="action-1", type="action",
                     data=NodeData(label="Send Slack Message", service="slack")),
            ],
            edges=[Edge(id="edge-1", source="trigger-1", target="action-1")],
        ),
        metadata=GenerationMetadata(tools_used=["performDeepDiscovery", "generateWorkflow"]),
    )


class FakeEngine(WorkflowEngine):
    """Scripted engine: replays progress updates, then returns or raises."""

    name = "fake"

    def __init__(
        self,
        result: Optional[GenerationResult] = None,
        updates: Optional[List[Dict[str, Any]]] = None,
        error: Optional[BaseException] = None,
        analysis: Optional[AIAnalysis] = None,
    ):
        self.result = result or slack_sheet_result()
        self.updates = updates if updates is not None else [
            {"phase": "analyzing", "message": "Analyzing...", "progress": 10},
            {"phase": "researching", "message": "Researching...", "progress": 40},
            {"phase": "generating", "message": "Generating...", "progress": 75},
        ]
        self.error = error
        self.analysis = analysis or AIAnalysis(
            blueprint="When a spreadsheet row is added, post to Slack.",
            assumptions=["The spreadsheet is a Google Sheet."],
            recommendations=["Limit notifications to one channel."],
            suggested_nodes=slack_sheet_result().workflow.nodes,
        )
        self.calls: List[Dict[str, Any]] = []
        self.analyze_calls: List[str] = []

    async def generate(self, prompt, on_progress=None, blueprint=None):
        self.calls.append({"prompt": prompt, "blueprint": blueprint})
        for update in self.updates:
            if on_progress:
                on_progress(update)
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result

    async def analyze(self, prompt):
        self.analyze_calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.analysis


def make_config(api_key: str = "sk-test-key", use_mock_data: bool = False) -> GeneratorConfig:
    return GeneratorConfig.from_env({
        "OPENAI_API_KEY": api_key,
        "FLOWCRAFT_USE_MOCK_DATA": "true" if use_mock_data else "false",
    })


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_orchestrator():
    """Build an orchestrator whose factory hands out the given engine and counts calls."""
    def _make(engine: WorkflowEngine, api_key: str = "sk-test-key", use_mock_data: bool = False):
        factory_calls: List[GeneratorConfig] = []

        def factory(config: GeneratorConfig) -> WorkflowEngine:
            factory_calls.append(config)
            return engine

        orchestrator = GenerationOrchestrator(make_config(api_key, use_mock_data), engine_factory=factory)
        orchestrator.factory_calls = factory_calls
        return orchestrator
    return _make


@pytest.fixture
def use_orchestrator():
    """Route every API request through the given orchestrator."""
    def _use(orchestrator: GenerationOrchestrator) -> GenerationOrchestrator:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return orchestrator
    yield _use
    app.dependency_overrides.clear()
    review_store.clear()
