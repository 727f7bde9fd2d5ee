# flowcraft/workflows/envelope_builder.py

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

from flowcraft.agents.writer_agent import WriterAgent
from flowcraft.core.config import SETUP_INSTRUCTIONS
from flowcraft.core.errors import EnvelopeInvariantViolation
from flowcraft.core.models import (
    FallbackErrorEnvelope,
    GenerationResult,
    ProgressUpdate,
    RemediationEnvelope,
    SuccessEnvelope,
    Workflow,
    WorkflowProject,
)

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ERROR = "Workflow generation failed"

FALLBACK_INSTRUCTIONS = [
    "Check server logs for details",
    "Verify OpenAI API key configuration",
    "Try again in a moment",
]


def assert_workflow_integrity(workflow: Workflow) -> None:
    """Raise EnvelopeInvariantViolation on duplicate node ids or dangling edges."""
    seen = set()
    for node in workflow.nodes:
        if node.id in seen:
            raise EnvelopeInvariantViolation(f"duplicate node id '{node.id}'")
        seen.add(node.id)
    for edge in workflow.edges:
        missing = [end for end in (edge.source, edge.target) if end not in seen]
        if missing:
            raise EnvelopeInvariantViolation(
                f"edge {edge.id or '?'} references unknown node(s): {', '.join(missing)}"
            )


def repair_workflow(workflow: Workflow) -> Tuple[Workflow, List[str]]:
    """
    Duplicate node ids make every edge ambiguous, so the graph degrades to
    empty. Otherwise only the dangling edges are dropped.
    """
    ids = [n.id for n in workflow.nodes]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        return Workflow(), [
            f"Duplicate node ids ({', '.join(duplicates)}); workflow degraded to empty."
        ]

    known = set(ids)
    kept, repairs = [], []
    for edge in workflow.edges:
        if edge.source in known and edge.target in known:
            kept.append(edge)
        else:
            repairs.append(f"Dropped edge {edge.id or '?'} ({edge.source} -> {edge.target}): unknown node.")
    return Workflow(nodes=list(workflow.nodes), edges=kept), repairs


def build_success_envelope(
    result: GenerationResult,
    progress_updates: Sequence[ProgressUpdate] = (),
) -> SuccessEnvelope:
    workflow = result.workflow or Workflow()
    repairs: List[str] = []
    try:
        assert_workflow_integrity(workflow)
    except EnvelopeInvariantViolation as e:
        logger.warning("Engine returned an inconsistent workflow: %s", e)
        workflow, repairs = repair_workflow(workflow)

    project = result.project or WorkflowProject()
    tools_used = result.metadata.tools_used

    return SuccessEnvelope(
        enthusiasm=WriterAgent.enthusiasm(workflow),
        technical_summary=WriterAgent.technical_summary(workflow, tools_used, repairs),
        workflow=workflow,
        project=project,
        insights=WriterAgent.insights(workflow, result.project),
        progress_updates=list(progress_updates),
    )


def remediation_envelope(error: str = "OpenAI API key not configured") -> RemediationEnvelope:
    return RemediationEnvelope(
        error=error,
        message="AI features require OpenAI API key configuration",
        instructions=list(SETUP_INSTRUCTIONS),
    )


def fallback_error_envelope(error: Optional[str], kind: str = "EngineError") -> FallbackErrorEnvelope:
    text = error if error and error.strip() else DEFAULT_ENGINE_ERROR
    return FallbackErrorEnvelope(
        error=text,
        message="Agentic workflow generation failed",
        error_details=f"{kind}: {text}",
        instructions=list(FALLBACK_INSTRUCTIONS),
    )
