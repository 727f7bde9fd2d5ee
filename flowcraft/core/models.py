# flowcraft/core/models.py

from __future__ import annotations
from typing import Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


NodeType = Literal["trigger", "action", "condition", "transform"]
Complexity = Literal["simple", "standard", "advanced", "enterprise"]


class _Model(BaseModel):
    # Accept both the snake_case field name and the camelCase wire alias.
    model_config = ConfigDict(populate_by_name=True)


# ===== WORKFLOW GRAPH =====

class Position(_Model):
    x: float = 0
    y: float = 0


class NodeData(_Model):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    label: str
    description: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    service: Optional[str] = None
    operation: Optional[str] = None


class Node(_Model):
    id: str
    type: NodeType
    position: Optional[Position] = None
    data: NodeData


class Edge(_Model):
    id: Optional[str] = None
    source: str
    target: str
    type: Optional[str] = None
    label: Optional[str] = None


class Workflow(_Model):
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


# ===== WORKFLOW EDITS =====

ChangeType = Literal["add_node", "modify_node", "remove_node", "add_edge", "modify_edge", "remove_edge"]


class WorkflowChange(_Model):
    type: ChangeType
    node_id: Optional[str] = Field(None, alias="nodeId")
    edge_id: Optional[str] = Field(None, alias="edgeId")
    node: Optional[Node] = None
    edge: Optional[Edge] = None
    updates: Optional[Dict[str, Any]] = None


class ModifyWorkflowRequest(_Model):
    workflow: Workflow
    changes: List[WorkflowChange] = Field(default_factory=list)


class DeltaResult(_Model):
    workflow: Workflow
    changes_applied: List[str] = Field(default_factory=list, alias="changesApplied")
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    summary: str


# ===== PROJECT (richer planning path) =====

class Component(_Model):
    name: str
    type: str = "action"
    dependencies: List[str] = Field(default_factory=list)
    description: Optional[str] = None


class Integration(_Model):
    service_name: str = Field(..., alias="serviceName")
    authentication: Optional[str] = None
    operations: List[str] = Field(default_factory=list)


class TestCase(_Model):
    __test__ = False  # not a pytest class

    name: str
    type: Literal["unit", "integration", "e2e"] = "unit"
    description: Optional[str] = None


class WorkflowProject(_Model):
    name: str = ""
    description: str = ""
    complexity: Complexity = "simple"
    components: List[Component] = Field(default_factory=list)
    integrations: List[Integration] = Field(default_factory=list)
    test_suite: List[TestCase] = Field(default_factory=list, alias="testSuite")


# ===== ANALYSIS / BLUEPRINT =====

class AIAnalysis(_Model):
    blueprint: str
    assumptions: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    suggested_nodes: List[Node] = Field(default_factory=list, alias="suggestedNodes")
    suggested_edges: List[Edge] = Field(default_factory=list, alias="suggestedEdges")


# ===== ENGINE RESULT =====

class GenerationMetadata(_Model):
    tools_used: List[str] = Field(default_factory=list, alias="toolsUsed")


class GenerationResult(_Model):
    success: bool
    workflow: Optional[Workflow] = None
    project: Optional[WorkflowProject] = None
    metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)
    error: Optional[str] = None
    error_kind: Optional[Literal["configuration", "engine"]] = None


# ===== PROGRESS =====

class ProgressUpdate(_Model):
    phase: str
    message: str
    percentage: int = Field(..., ge=0, le=100)


# ===== API SCHEMA =====

class GenerateRequest(_Model):
    # Optional so a missing prompt reaches our own 400, not FastAPI's 422.
    prompt: Optional[str] = Field(None, description="Natural-language automation request")


class EditBlueprintRequest(_Model):
    blueprint: Optional[str] = None


class Insights(_Model):
    complexity_analysis: str
    security_considerations: List[str] = Field(default_factory=list)
    performance_tips: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)


class SuccessEnvelope(_Model):
    status_code: ClassVar[int] = 200

    success: Literal[True] = True
    enthusiasm: str
    technical_summary: str
    workflow: Workflow
    project: WorkflowProject
    insights: Insights
    execution_ready: Literal[True] = True
    progress_updates: List[ProgressUpdate] = Field(default_factory=list)


class RemediationEnvelope(_Model):
    """Missing configuration. Accepted, not failed."""
    status_code: ClassVar[int] = 200

    success: Literal[False] = False
    error: str
    fallback: Literal[True] = True
    message: str
    instructions: List[str]


class FallbackErrorEnvelope(_Model):
    status_code: ClassVar[int] = 500

    success: Literal[False] = False
    error: str
    fallback: Literal[True] = True
    message: str
    error_details: str = Field(..., alias="errorDetails")
    instructions: List[str]


Envelope = Union[SuccessEnvelope, RemediationEnvelope, FallbackErrorEnvelope]
