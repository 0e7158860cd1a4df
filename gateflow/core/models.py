"""
Domain models for the gated workflow engine.

All models use Pydantic for validation and serialization. Conditions and
behaviors are polymorphic; they are persisted as ``{"type", "data"}`` pairs
and rebuilt through their type-tag registries.
"""

import logging
from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    model_validator,
)

from gateflow.core.behaviors import EmptyBehavior, NodeBehavior, behavior_registry
from gateflow.core.exceptions import WorkflowConstructionError
from gateflow.core.gates import Gate
from gateflow.core.graph import validate_graph
from gateflow.core.state_machine import (
    NodeStateMachine,
    NodeStatus,
    WorkflowStateMachine,
    WorkflowStatus,
    compute_workflow_status_from_nodes,
)

logger = logging.getLogger(__name__)

NodeId = int


def _encode_behavior(behavior: NodeBehavior) -> dict[str, Any]:
    return {"type": behavior.type_tag, "data": behavior.behavior_data()}


def _decode_behavior(value: Any) -> NodeBehavior:
    if isinstance(value, NodeBehavior):
        return value
    return behavior_registry.decode(value)


BehaviorField = Annotated[
    NodeBehavior,
    PlainValidator(_decode_behavior),
    PlainSerializer(_encode_behavior),
]


class Edge(BaseModel):
    """Directed transition from the owning node to ``target``, guarded by ``gate``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target: NodeId = Field(..., ge=0, description="Target node id")
    gate: Gate = Field(..., description="Guard evaluated on every dispatch")


class Node(BaseModel):
    """
    One step of a workflow.

    Node instances are copied whenever they are validated into a workflow,
    so a workflow never shares node status with its caller or another
    workflow. Edges are immutable and behaviors are shared as is.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, revalidate_instances="always")

    id: NodeId = Field(..., ge=0, description="Position of the node in the workflow")
    name: str = Field(default="", description="Display name")
    status: NodeStatus = Field(default=NodeStatus.NOT_STARTED)
    edges: tuple[Edge, ...] = Field(default=(), description="Outgoing edges in tie-break order")
    behavior: BehaviorField = Field(default_factory=EmptyBehavior)


class Workflow(BaseModel):
    """
    Aggregate root: owns its nodes and edges exclusively.

    The graph is validated on construction; invalid graphs raise
    WorkflowConstructionError.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: UUID = Field(default_factory=uuid4, description="Unique workflow ID")
    user_id: UUID = Field(default_factory=uuid4, description="Owning user")
    name: str = Field(default="", max_length=255)
    nodes: list[Node] = Field(..., description="Nodes ordered by id")
    status: WorkflowStatus = Field(default=WorkflowStatus.ACTIVE)

    @model_validator(mode="after")
    def validate_structure(self) -> "Workflow":
        """Reject malformed graphs at build time."""
        result = validate_graph(self.nodes)
        if not result.is_valid:
            raise WorkflowConstructionError(result)
        for warning in result.warnings:
            logger.debug(f"Workflow {self.id}: {warning.code}: {warning.message}")
        return self

    # ==================== Read-only accessors ====================

    def get_node(self, node_id: NodeId) -> Optional[Node]:
        """Get node by ID."""
        if 0 <= node_id < len(self.nodes):
            return self.nodes[node_id]
        return None

    def node_status(self, node_id: NodeId) -> NodeStatus:
        """Get the current status of a node."""
        return self._require_node(node_id).status

    def edges(self, node_id: NodeId) -> tuple[Edge, ...]:
        """Get the outgoing edges of a node."""
        return self._require_node(node_id).edges

    def active_node_ids(self) -> list[NodeId]:
        """Get ids of active nodes in node order."""
        return [node.id for node in self.nodes if node.status == NodeStatus.ACTIVE]

    def status_snapshot(self) -> tuple[NodeStatus, ...]:
        """Get an immutable copy of every node status, indexed by node id."""
        return tuple(node.status for node in self.nodes)

    @property
    def is_complete(self) -> bool:
        """Check if every node is completed."""
        return all(node.status == NodeStatus.COMPLETED for node in self.nodes)

    @property
    def is_terminal(self) -> bool:
        """Check if the workflow can no longer change."""
        return WorkflowStateMachine.is_terminal(self.status)

    # ==================== Mutators ====================

    def set_status(self, node_id: NodeId, status: NodeStatus) -> None:
        """
        Advance a node's status.

        Raises:
            InvalidStateTransitionError: If the move is backward or skips a step
        """
        node = self._require_node(node_id)
        NodeStateMachine.check_transition(node.status, status)
        node.status = status

    def set_workflow_status(self, status: WorkflowStatus) -> None:
        """
        Move the workflow to a terminal status.

        Raises:
            InvalidStateTransitionError: If the workflow is already terminal
        """
        WorkflowStateMachine.check_transition(self.status, status)
        self.status = status

    def _require_node(self, node_id: NodeId) -> Node:
        node = self.get_node(node_id)
        if node is None:
            raise KeyError(f"Node {node_id} not found in workflow {self.id}")
        return node


class WorkflowSummary(BaseModel):
    """Lightweight listing entry for a stored workflow."""

    id: UUID
    user_id: UUID
    name: str
    status: WorkflowStatus
    updated_at: Optional[datetime] = None


class DispatchResult(BaseModel):
    """Outcome of one event dispatch."""

    newly_activated: list[NodeId] = Field(
        default_factory=list,
        description="Nodes activated by this dispatch, in activation order",
    )
    newly_completed: list[NodeId] = Field(
        default_factory=list,
        description="Nodes completed by this dispatch, in completion order",
    )
    activation_outputs: dict[NodeId, str] = Field(
        default_factory=dict,
        description="Advisory strings returned by on_activated hooks",
    )
    completed: bool = Field(default=False, description="Workflow is completed after this dispatch")


def new_workflow(
    nodes: list[Node],
    user_id: Optional[UUID] = None,
    name: str = "",
    workflow_id: Optional[UUID] = None,
) -> Workflow:
    """
    Build a workflow from nodes.

    Nodes keep the statuses they were given, so start nodes are pre-seeded
    ACTIVE by the caller. The workflow status is derived from them.

    Raises:
        WorkflowConstructionError: If the graph is malformed
    """
    return Workflow(
        id=workflow_id or uuid4(),
        user_id=user_id or uuid4(),
        name=name,
        nodes=nodes,
        status=compute_workflow_status_from_nodes(node.status for node in nodes),
    )
