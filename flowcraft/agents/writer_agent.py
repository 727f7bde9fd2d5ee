# flowcraft/agents/writer_agent.py

from __future__ import annotations
from typing import List, Optional

from flowcraft.core.models import Insights, Workflow, WorkflowProject


class WriterAgent:
    """
    Turns a generated workflow into the presentation text of the envelope.
    Deterministic output; wording is advisory and not part of the contract.
    """

    @staticmethod
    def enthusiasm(workflow: Workflow) -> str:
        if not workflow.nodes:
            return "I've set up a starting point for your automation. Add steps to bring it to life!"
        triggers = [n for n in workflow.nodes if n.type == "trigger"]
        return (
            f"Amazing! I've built a {len(workflow.nodes)}-step automation"
            f"{' that starts with ' + triggers[0].data.label if triggers else ''}"
            " and wires up your integrations end to end!"
        )

    @staticmethod
    def technical_summary(workflow: Workflow, tools_used: List[str], repairs: Optional[List[str]] = None) -> str:
        lines = [
            f"**What I built:** A workflow with {len(workflow.nodes)} nodes and "
            f"{len(workflow.edges)} connections, generated with {len(tools_used)} tools.",
        ]
        if tools_used:
            lines.append(f"**Tools used:** {', '.join(tools_used)}")
        if repairs:
            lines.append("**Graph repairs:**")
            lines.extend(f"- {r}" for r in repairs)
        return "\n".join(lines)

    @staticmethod
    def insights(workflow: Workflow, project: Optional[WorkflowProject] = None) -> Insights:
        by_type = {}
        for node in workflow.nodes:
            by_type[node.type] = by_type.get(node.type, 0) + 1
        breakdown = ", ".join(f"{count} {kind}" for kind, count in sorted(by_type.items())) or "no nodes"
        complexity = project.complexity if project else "simple"

        services = sorted({n.data.service for n in workflow.nodes if n.data.service})
        security = ["Store service credentials outside the workflow definition."]
        if services:
            security.append(f"Grant least-privilege access for: {', '.join(services)}.")

        tips = ["Batch calls to rate-limited services where possible."]
        if by_type.get("condition"):
            tips.append("Place conditions early to skip unnecessary downstream calls.")

        return Insights(
            complexity_analysis=f"{complexity.capitalize()} workflow: {breakdown}.",
            security_considerations=security,
            performance_tips=tips,
            next_steps=["Test the workflow", "Customize as needed", "Deploy when ready"],
        )
