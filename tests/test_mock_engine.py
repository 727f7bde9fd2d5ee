# tests/test_mock_engine.py

import pytest

from flowcraft.agents.mock_engine import MockWorkflowEngine, build_workflow, plan_from_text
from conftest import SLACK_PROMPT


def test_spreadsheet_to_slack_is_two_nodes_one_edge():
    wf = build_workflow(SLACK_PROMPT)

    assert [(n.type, n.data.service) for n in wf.nodes] == [("trigger", "google_sheets"), ("action", "slack")]
    assert len(wf.edges) == 1
    assert (wf.edges[0].source, wf.edges[0].target) == ("trigger-1", "action-1")


def test_condition_and_transform_are_inserted_before_actions():
    wf = build_workflow("When a webhook fires, summarize it and post to Discord only if it is urgent")

    assert [n.type for n in wf.nodes] == ["trigger", "condition", "transform", "action"]
    assert len(wf.edges) == 3


def test_actions_follow_mention_order():
    plan = plan_from_text("Every morning create a Trello card and then post to Slack")
    assert [a[1] for a in plan["actions"]] == ["trello", "slack"]
    assert plan["trigger"][1] == "schedule"


def test_unrecognised_request_falls_back_to_manual():
    wf = build_workflow("do the thing")
    assert wf.nodes[0].data.service == "manual"
    assert len(wf.nodes) == 2


@pytest.mark.asyncio
async def test_generate_reports_progress_and_completes():
    updates = []
    result = await MockWorkflowEngine().generate(SLACK_PROMPT, on_progress=updates.append)

    assert result.success
    assert updates[-1]["phase"] == "complete"
    assert [u["progress"] for u in updates] == sorted(u["progress"] for u in updates)
    assert result.metadata.tools_used == ["keywordPlanner", "workflowBuilder"]
    assert [i.service_name for i in result.project.integrations] == ["google_sheets", "slack"]


@pytest.mark.asyncio
async def test_blueprint_takes_precedence_over_prompt():
    result = await MockWorkflowEngine().generate(SLACK_PROMPT, blueprint="When a webhook fires, send an SMS")
    assert [n.data.service for n in result.workflow.nodes] == ["webhook", "twilio"]


@pytest.mark.asyncio
async def test_analysis_blueprint_round_trips_to_same_workflow():
    engine = MockWorkflowEngine()
    analysis = await engine.analyze(SLACK_PROMPT)
    result = await engine.generate(SLACK_PROMPT, blueprint=analysis.blueprint)

    assert [n.id for n in result.workflow.nodes] == [n.id for n in analysis.suggested_nodes]
    assert analysis.assumptions and analysis.recommendations
