# flowcraft/integrations/openai_engine.py

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

import openai
from pydantic import ValidationError as SchemaError

from flowcraft.core.config import GeneratorConfig
from flowcraft.core.engine import EngineProgressCallback, WorkflowEngine
from flowcraft.core.errors import ConfigurationError, EngineError, classify_failure
from flowcraft.core.models import (
    AIAnalysis,
    GenerationMetadata,
    GenerationResult,
    Workflow,
    WorkflowProject,
)
from flowcraft.integrations.llm_client import LLMClient
from flowcraft.utils.helpers import dedent_and_strip, truncate

logger = logging.getLogger(__name__)

NODE_TYPES = {"trigger", "action", "condition", "transform"}

SYSTEM_PROMPT = dedent_and_strip("""
    You are FlowCraft AI, an expert automation workflow builder.
    You turn natural-language requests into workflows made of trigger, action,
    condition and transform nodes connected by edges.
    Prefer popular, well-supported services and realistic implementations.
    Always answer with a single valid JSON object and nothing else.
""")

DISCOVERY_PROMPT = """
Analyze this automation request and extract its requirements.

Request: "{prompt}"
{blueprint_section}
Return JSON with keys:
  summary (string), triggers (list of {{service, operation, description}}),
  actions (list of {{service, operation, description}}),
  requiredIntegrations (list of service names),
  complexity ("simple" | "standard" | "advanced" | "enterprise")
"""

RESEARCH_PROMPT = """
For each of these services, describe how a workflow would integrate with it.

Services: {services}

Return JSON with key integrations: a list of
  {{serviceName, authentication ("api_key" | "oauth2" | "bearer" | "basic"), operations (list of strings)}}
"""

WORKFLOW_PROMPT = """
Generate a complete workflow from this analysis.

Discovery: {discovery}
Integrations: {integrations}

Return JSON with keys:
  workflow: {{nodes: [{{id, type ("trigger" | "action" | "condition" | "transform"),
              data: {{label, description, service, operation, config}}}}],
             edges: [{{id, source, target}}]}}
  project: {{name, description, complexity,
             components: [{{name, type, dependencies}}],
             testSuite: [{{name, type ("unit" | "integration" | "e2e"), description}}]}}
Node ids must be unique and every edge must connect existing node ids.
"""

ANALYSIS_PROMPT = """
Propose a workflow blueprint for this automation request, for a human to review
before anything is generated.

Request: "{prompt}"

Return JSON with keys:
  blueprint (one or two plain sentences describing the workflow),
  assumptions (list of strings), recommendations (list of strings),
  suggestedNodes (list of {{id, type, data: {{label, service, operation}}}}),
  suggestedEdges (list of {{id, source, target}})
"""


def _normalize_nodes(raw_nodes: Any) -> List[Dict[str, Any]]:
    """Coerce model output into our node shape; unknown types become actions."""
    nodes = []
    for i, raw in enumerate(raw_nodes or [], start=1):
        if not isinstance(raw, dict):
            continue
        data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
        node_type = str(raw.get("type") or "action").lower()
        nodes.append({
            "id": str(raw.get("id") or f"node-{i}"),
            "type": node_type if node_type in NODE_TYPES else "action",
            "position": raw.get("position") if isinstance(raw.get("position"), dict) else None,
            "data": {**data, "label": str(data.get("label") or raw.get("label") or f"Step {i}")},
        })
    return nodes


def _normalize_edges(raw_edges: Any) -> List[Dict[str, Any]]:
    edges = []
    for i, raw in enumerate(raw_edges or [], start=1):
        if isinstance(raw, dict) and raw.get("source") and raw.get("target"):
            edges.append({
                "id": str(raw.get("id") or f"edge-{i}"),
                "source": str(raw["source"]),
                "target": str(raw["target"]),
            })
    return edges


def parse_workflow(payload: Dict[str, Any]) -> Optional[Workflow]:
    raw = payload.get("workflow") if isinstance(payload.get("workflow"), dict) else None
    if raw is None:
        return None
    return Workflow.model_validate({
        "nodes": _normalize_nodes(raw.get("nodes")),
        "edges": _normalize_edges(raw.get("edges")),
    })


def parse_project(payload: Dict[str, Any]) -> Optional[WorkflowProject]:
    raw = payload.get("project")
    if not isinstance(raw, dict):
        return None
    if raw.get("complexity") not in ("simple", "standard", "advanced", "enterprise"):
        raw = {**raw, "complexity": "standard"}
    return WorkflowProject.model_validate(raw)


class OpenAIWorkflowEngine(WorkflowEngine):
    """
    Engine backed by OpenAI chat completions. Runs the tool chain
    classify/discover -> research integrations -> generate workflow,
    reporting progress between steps.

    Known failures come back as GenerationResult(success=False) with a typed
    error_kind; anything unexpected propagates to the orchestrator.
    """

    name = "openai"

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    async def generate(
        self,
        prompt: str,
        on_progress: Optional[EngineProgressCallback] = None,
        blueprint: Optional[str] = None,
    ) -> GenerationResult:
        notify = on_progress or (lambda update: None)
        tools_used: List[str] = []

        try:
            notify({"phase": "analyzing", "message": "Analyzing your automation request...", "progress": 10})
            blueprint_section = f'\nApproved blueprint: "{blueprint}"\n' if blueprint else ""
            discovery = await self.llm.chat_json(
                DISCOVERY_PROMPT.format(prompt=prompt, blueprint_section=blueprint_section),
                system=SYSTEM_PROMPT,
            )
            tools_used.append("performDeepDiscovery")

            services = [str(s) for s in discovery.get("requiredIntegrations") or []]
            notify({
                "phase": "researching",
                "message": f"Researching {len(services)} integrations...",
                "progress": 35,
            })
            integrations: Dict[str, Any] = {"integrations": []}
            if services:
                integrations = await self.llm.chat_json(
                    RESEARCH_PROMPT.format(services=", ".join(services)),
                    system=SYSTEM_PROMPT,
                )
                tools_used.append("researchIntegrations")

            notify({"phase": "generating", "message": "Building your workflow...", "progress": 70})
            payload = await self.llm.chat_json(
                WORKFLOW_PROMPT.format(
                    discovery=json.dumps(discovery),
                    integrations=json.dumps(integrations.get("integrations") or []),
                ),
                system=SYSTEM_PROMPT,
            )
            tools_used.append("generateWorkflow")

            workflow = parse_workflow(payload)
            project = parse_project(payload)
            if project is not None and not project.integrations:
                project.integrations = WorkflowProject.model_validate(
                    {"integrations": integrations.get("integrations") or []}
                ).integrations

        except (openai.OpenAIError, ConfigurationError, EngineError, SchemaError) as e:
            kind = "configuration" if classify_failure(e) is ConfigurationError else "engine"
            logger.warning("OpenAI engine failed (%s): %s", kind, truncate(str(e), 200))
            return GenerationResult(
                success=False,
                error=str(e) or type(e).__name__,
                error_kind=kind,
                metadata=GenerationMetadata(tools_used=tools_used),
            )

        notify({"phase": "complete", "message": "Workflow generation complete!", "progress": 100})
        return GenerationResult(
            success=True,
            workflow=workflow,
            project=project,
            metadata=GenerationMetadata(tools_used=tools_used),
        )

    async def analyze(self, prompt: str) -> AIAnalysis:
        payload = await self.llm.chat_json(ANALYSIS_PROMPT.format(prompt=prompt), system=SYSTEM_PROMPT)
        try:
            return AIAnalysis.model_validate({
                "blueprint": str(payload.get("blueprint") or "").strip() or f"Automation for: {prompt}",
                "assumptions": [str(a) for a in payload.get("assumptions") or []],
                "recommendations": [str(r) for r in payload.get("recommendations") or []],
                "suggestedNodes": _normalize_nodes(payload.get("suggestedNodes")),
                "suggestedEdges": _normalize_edges(payload.get("suggestedEdges")),
            })
        except SchemaError as e:
            raise EngineError(f"Malformed analysis output: {e}") from e


def create_engine(config: GeneratorConfig) -> WorkflowEngine:
    """One engine session per call; nothing is shared between sessions."""
    llm = LLMClient(
        api_key=config.credential,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )
    return OpenAIWorkflowEngine(llm)
