# flowcraft/agents/mock_engine.py

from __future__ import annotations
import logging
import re
from typing import Dict, List, Optional, Tuple

from flowcraft.core.engine import EngineProgressCallback, WorkflowEngine
from flowcraft.core.models import (
    AIAnalysis,
    Component,
    Edge,
    GenerationMetadata,
    GenerationResult,
    Integration,
    Node,
    NodeData,
    Position,
    TestCase,
    Workflow,
    WorkflowProject,
)

logger = logging.getLogger(__name__)

# --- Keyword catalog ----------------------------------------------------------
# (keywords, service, label, operation). Order = priority when several match.
TRIGGERS: List[Tuple[List[str], str, str, str]] = [
    (["spreadsheet", "google sheet", "sheet", "new row"], "google_sheets", "New Spreadsheet Row", "watch_rows"),
    (["webhook"], "webhook", "Incoming Webhook", "receive"),
    (["new email", "email arrives", "receive an email", "inbox"], "gmail", "New Email", "watch_inbox"),
    (["form is submitted", "form submission", "typeform"], "forms", "New Form Submission", "watch_submissions"),
    (["every day", "daily", "every hour", "hourly", "weekly", "every morning", "schedule"], "schedule", "Schedule", "cron"),
]

ACTIONS: List[Tuple[List[str], str, str, str]] = [
    (["slack"], "slack", "Send Slack Message", "post_message"),
    (["send email", "send an email", "email me", "send me an email"], "gmail", "Send Email", "send"),
    (["discord"], "discord", "Post Discord Message", "post_message"),
    (["sms", "text message", "twilio"], "twilio", "Send SMS", "send_sms"),
    (["notion"], "notion", "Create Notion Page", "create_page"),
    (["trello"], "trello", "Create Trello Card", "create_card"),
    (["crm", "hubspot", "salesforce"], "hubspot", "Update CRM Record", "upsert_contact"),
]

CONDITION_TERMS = ["only if", "only when", "if ", "unless", "filter", "check condition"]
TRANSFORM_TERMS = ["summarize", "summary", "format", "extract", "translate", "convert", "transform"]

# plan_from_text, then build_workflow.
TOOLS_USED = ["keywordPlanner", "workflowBuilder"]


def _first_hit(text: str, terms: List[str]) -> int:
    """Earliest position of any term in text, or -1."""
    hits = [text.find(t) for t in terms if t in text]
    return min(hits) if hits else -1


def _has_any(text: str, terms: List[str]) -> bool:
    return any(t in text for t in terms)


def plan_from_text(text: str) -> Dict[str, object]:
    """
    Keyword plan for a request: one trigger, optional condition/transform,
    and the actions in the order the request mentions them.
    """
    t = re.sub(r"\s+", " ", (text or "").lower())

    trigger = next((entry for entry in TRIGGERS if _has_any(t, entry[0])), None)
    if trigger is None:
        trigger = ([], "manual", "Manual Trigger", "start")

    actions = []
    for entry in ACTIONS:
        pos = _first_hit(t, entry[0])
        if pos >= 0 and entry[1] != trigger[1]:
            actions.append((pos, entry))
    actions.sort(key=lambda a: a[0])
    action_entries = [entry for _, entry in actions] or [([], "manual", "Process Data", "process")]

    return {
        "trigger": trigger,
        "condition": _has_any(t, CONDITION_TERMS),
        "transform": _has_any(t, TRANSFORM_TERMS),
        "actions": action_entries,
    }


def build_workflow(text: str) -> Workflow:
    plan = plan_from_text(text)
    nodes: List[Node] = []

    def add(node_type: str, n: int, label: str, service: str, operation: str) -> None:
        nodes.append(Node(
            id=f"{node_type}-{n}",
            type=node_type,
            position=Position(x=200, y=50 + 150 * len(nodes)),
            data=NodeData(label=label, service=service, operation=operation,
                          description=f"{label} ({service})"),
        ))

    _, service, label, operation = plan["trigger"]
    add("trigger", 1, label, service, operation)
    if plan["condition"]:
        add("condition", 1, "Check Condition", "logic", "filter")
    if plan["transform"]:
        add("transform", 1, "Transform Data", "formatter", "transform")
    for i, (_, service, label, operation) in enumerate(plan["actions"], start=1):
        add("action", i, label, service, operation)

    edges = [
        Edge(id=f"edge-{i}", source=a.id, target=b.id, type="smoothstep")
        for i, (a, b) in enumerate(zip(nodes, nodes[1:]), start=1)
    ]
    return Workflow(nodes=nodes, edges=edges)


def _sentence(workflow: Workflow) -> str:
    trigger = workflow.nodes[0].data.label
    steps = [n.data.label for n in workflow.nodes[1:]]
    return f"When '{trigger}' fires, the workflow will " + " then ".join(
        f"'{s}'" for s in steps
    ) + "."


class MockWorkflowEngine(WorkflowEngine):
    """
    Deterministic, offline engine used when synthetic data is requested.
    Same contract as the OpenAI engine; keyword heuristics instead of a model.
    """

    name = "mock"

    async def generate(
        self,
        prompt: str,
        on_progress: Optional[EngineProgressCallback] = None,
        blueprint: Optional[str] = None,
    ) -> GenerationResult:
        notify = on_progress or (lambda update: None)
        source = blueprint or prompt

        notify({"phase": "analyzing", "message": "Analyzing your automation request...", "progress": 10})
        plan = plan_from_text(source)
        notify({"phase": "researching", "message": f"Matched trigger: {plan['trigger'][2]}", "progress": 35})
        notify({"phase": "connecting", "message": "Connecting integrations...", "progress": 60})
        workflow = build_workflow(source)
        notify({"phase": "generating", "message": f"Generated {len(workflow.nodes)} nodes", "progress": 85})

        services = sorted({n.data.service for n in workflow.nodes if n.data.service not in (None, "manual")})
        project = WorkflowProject(
            name=workflow.nodes[0].data.label + " automation",
            description=f"Automation for: {prompt}",
            complexity="simple" if len(workflow.nodes) <= 3 else "standard",
            components=[Component(name=n.data.label, type=n.type) for n in workflow.nodes],
            integrations=[Integration(service_name=s) for s in services],
            test_suite=[TestCase(name=f"{n.data.label} runs", type="integration") for n in workflow.nodes],
        )
        notify({"phase": "complete", "message": "Workflow generation complete!", "progress": 100})
        logger.info("Mock engine produced %d nodes / %d edges", len(workflow.nodes), len(workflow.edges))

        return GenerationResult(
            success=True,
            workflow=workflow,
            project=project,
            metadata=GenerationMetadata(tools_used=list(TOOLS_USED)),
        )

    async def analyze(self, prompt: str) -> AIAnalysis:
        workflow = build_workflow(prompt)
        plan = plan_from_text(prompt)
        assumptions = []
        if plan["trigger"][1] == "manual":
            assumptions.append("No trigger was recognised, so the workflow starts manually.")
        if plan["actions"][0][1] == "manual":
            assumptions.append("No known service was recognised for the action step.")
        assumptions.append("Credentials for each service will be connected before the first run.")

        return AIAnalysis(
            blueprint=_sentence(workflow),
            assumptions=assumptions,
            recommendations=[
                "Test the workflow with sample data before enabling it.",
                "Add error notifications for failed steps.",
            ],
            suggested_nodes=workflow.nodes,
            suggested_edges=workflow.edges,
        )
