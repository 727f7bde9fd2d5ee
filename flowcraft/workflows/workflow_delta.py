# flowcraft/workflows/workflow_delta.py

from __future__ import annotations
import logging
from typing import Any, Dict, List, Sequence, Set

from pydantic import ValidationError as SchemaError

from flowcraft.core.errors import EnvelopeInvariantViolation
from flowcraft.core.models import DeltaResult, Edge, Node, Workflow, WorkflowChange
from flowcraft.workflows.envelope_builder import assert_workflow_integrity, repair_workflow

logger = logging.getLogger(__name__)


def _fresh_id(base: str, taken: Set[str]) -> str:
    if base not in taken:
        return base
    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


class _DeltaSession:
    """
    Applies changes one at a time to a private copy of the workflow.
    A change that cannot be applied is recorded in `errors` and skipped;
    the remaining changes still apply.
    """

    def __init__(self, workflow: Workflow) -> None:
        self.nodes: List[Node] = [n.model_copy(deep=True) for n in workflow.nodes]
        self.edges: List[Edge] = [e.model_copy(deep=True) for e in workflow.edges]
        self.applied: List[str] = []
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def _node_index(self, node_id: str) -> int:
        return next((i for i, n in enumerate(self.nodes) if n.id == node_id), -1)

    def _edge_index(self, edge_id: str) -> int:
        return next((i for i, e in enumerate(self.edges) if e.id == edge_id), -1)

    def _merged(self, current: Dict[str, Any], updates: Dict[str, Any], kind: str, item_id: str) -> Dict[str, Any]:
        updates = dict(updates)
        new_id = updates.pop("id", item_id)
        if new_id != item_id:
            self.warnings.append(f"{kind.capitalize()} ids cannot be changed; kept {item_id}")
        merged = {**current, **updates}
        if kind == "node" and isinstance(updates.get("data"), dict):
            merged["data"] = {**current["data"], **updates["data"]}
        return merged

    def add_node(self, change: WorkflowChange) -> None:
        if change.node is None:
            self.errors.append("add_node change missing node data")
            return
        node = change.node.model_copy(deep=True)
        taken = {n.id for n in self.nodes}
        if node.id in taken:
            node.id = _fresh_id(node.id, taken)
            self.warnings.append(f"Node ID was duplicated, renamed to {node.id}")
        self.nodes.append(node)
        self.applied.append(f"Added node: {node.data.label or node.id}")

    def modify_node(self, change: WorkflowChange) -> None:
        if not change.node_id or not change.updates:
            self.errors.append("modify_node change missing nodeId or updates")
            return
        i = self._node_index(change.node_id)
        if i < 0:
            self.errors.append(f"Node with ID {change.node_id} not found")
            return
        merged = self._merged(self.nodes[i].model_dump(), change.updates, "node", change.node_id)
        try:
            self.nodes[i] = Node.model_validate(merged)
        except SchemaError as e:
            self.errors.append(f"Invalid update for node {change.node_id}: {e.error_count()} field error(s)")
            return
        self.applied.append(f"Modified node: {change.node_id}")

    def remove_node(self, change: WorkflowChange) -> None:
        if not change.node_id:
            self.errors.append("remove_node change missing nodeId")
            return
        i = self._node_index(change.node_id)
        if i < 0:
            self.errors.append(f"Node with ID {change.node_id} not found")
            return
        removed = self.nodes.pop(i)
        before = len(self.edges)
        self.edges = [e for e in self.edges if change.node_id not in (e.source, e.target)]
        self.applied.append(f"Removed node: {removed.data.label or removed.id}")
        if len(self.edges) < before:
            self.applied.append(f"Removed {before - len(self.edges)} connected edges")

    def add_edge(self, change: WorkflowChange) -> None:
        if change.edge is None:
            self.errors.append("add_edge change missing edge data")
            return
        edge = change.edge.model_copy(deep=True)
        node_ids = {n.id for n in self.nodes}
        if edge.source not in node_ids:
            self.errors.append(f"Source node {edge.source} does not exist")
            return
        if edge.target not in node_ids:
            self.errors.append(f"Target node {edge.target} does not exist")
            return
        taken = {e.id for e in self.edges if e.id}
        if not edge.id:
            edge.id = _fresh_id(f"edge-{edge.source}-{edge.target}", taken)
        elif edge.id in taken:
            edge.id = _fresh_id(edge.id, taken)
            self.warnings.append(f"Edge ID was duplicated, renamed to {edge.id}")
        self.edges.append(edge)
        self.applied.append(f"Added edge: {edge.source} -> {edge.target}")

    def modify_edge(self, change: WorkflowChange) -> None:
        if not change.edge_id or not change.updates:
            self.errors.append("modify_edge change missing edgeId or updates")
            return
        i = self._edge_index(change.edge_id)
        if i < 0:
            self.errors.append(f"Edge with ID {change.edge_id} not found")
            return
        merged = self._merged(self.edges[i].model_dump(), change.updates, "edge", change.edge_id)
        try:
            self.edges[i] = Edge.model_validate(merged)
        except SchemaError as e:
            self.errors.append(f"Invalid update for edge {change.edge_id}: {e.error_count()} field error(s)")
            return
        self.applied.append(f"Modified edge: {change.edge_id}")

    def remove_edge(self, change: WorkflowChange) -> None:
        if not change.edge_id:
            self.errors.append("remove_edge change missing edgeId")
            return
        i = self._edge_index(change.edge_id)
        if i < 0:
            self.errors.append(f"Edge with ID {change.edge_id} not found")
            return
        removed = self.edges.pop(i)
        self.applied.append(f"Removed edge: {removed.source} -> {removed.target}")


def apply_workflow_delta(workflow: Workflow, changes: Sequence[WorkflowChange]) -> DeltaResult:
    """
    Apply add/modify/remove edits for nodes and edges, in order, to a copy
    of `workflow`. The result always satisfies the graph invariants: edges
    left dangling by the edits are dropped and reported as errors.
    """
    session = _DeltaSession(workflow)
    for change in changes:
        getattr(session, change.type)(change)

    updated = Workflow(nodes=session.nodes, edges=session.edges)
    try:
        assert_workflow_integrity(updated)
    except EnvelopeInvariantViolation:
        updated, repairs = repair_workflow(updated)
        session.errors.extend(repairs)

    summary = f"Applied {len(session.applied)} changes"
    if session.errors:
        summary += f" with {len(session.errors)} errors"
    if session.warnings:
        summary += f" and {len(session.warnings)} warnings"
    logger.info("Workflow edit: %s", summary)

    return DeltaResult(
        workflow=updated,
        changes_applied=session.applied,
        errors=session.errors,
        warnings=session.warnings,
        summary=summary,
    )
