"""
State machine definitions for node and workflow statuses.

Node statuses only ever advance: NOT_STARTED -> ACTIVE -> COMPLETED.
FAILED exists at the workflow level only.
"""

from enum import Enum
from typing import Iterable

from gateflow.core.exceptions import InvalidStateTransitionError


class NodeStatus(str, Enum):
    """
    Possible statuses for a workflow node.

    State transitions:
    - NOT_STARTED -> ACTIVE (activated by a satisfied inbound edge)
    - ACTIVE -> COMPLETED (all outgoing gates satisfied, or no outgoing edges)
    """

    NOT_STARTED = "NOT_STARTED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class WorkflowStatus(str, Enum):
    """
    Possible statuses for a workflow.

    State transitions:
    - ACTIVE -> COMPLETED (every node completed)
    - ACTIVE -> FAILED (hook failure or invariant violation during dispatch)
    """

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class NodeStateMachine:
    """Forward-only transition table for node statuses."""

    VALID_TRANSITIONS: dict[NodeStatus, set[NodeStatus]] = {
        NodeStatus.NOT_STARTED: {NodeStatus.ACTIVE},
        NodeStatus.ACTIVE: {NodeStatus.COMPLETED},
        NodeStatus.COMPLETED: set(),  # Terminal state
    }

    TERMINAL_STATES: set[NodeStatus] = {NodeStatus.COMPLETED}

    @classmethod
    def can_transition(cls, from_state: NodeStatus, to_state: NodeStatus) -> bool:
        """Check if a transition between two statuses is valid."""
        return to_state in cls.VALID_TRANSITIONS.get(from_state, set())

    @classmethod
    def get_valid_transitions(cls, from_state: NodeStatus) -> set[NodeStatus]:
        """Get all valid transitions from a status."""
        return cls.VALID_TRANSITIONS.get(from_state, set()).copy()

    @classmethod
    def check_transition(cls, from_state: NodeStatus, to_state: NodeStatus) -> None:
        """
        Validate a transition.

        Raises:
            InvalidStateTransitionError: If the transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                from_state.value,
                to_state.value,
                f"Valid transitions: {sorted(s.value for s in cls.get_valid_transitions(from_state))}",
            )


class WorkflowStateMachine:
    """Transition table for workflow statuses."""

    VALID_TRANSITIONS: dict[WorkflowStatus, set[WorkflowStatus]] = {
        WorkflowStatus.ACTIVE: {WorkflowStatus.COMPLETED, WorkflowStatus.FAILED},
        WorkflowStatus.COMPLETED: set(),  # Terminal state
        WorkflowStatus.FAILED: set(),     # Terminal state
    }

    TERMINAL_STATES: set[WorkflowStatus] = {
        WorkflowStatus.COMPLETED,
        WorkflowStatus.FAILED,
    }

    @classmethod
    def can_transition(cls, from_state: WorkflowStatus, to_state: WorkflowStatus) -> bool:
        """Check if a transition between two statuses is valid."""
        return to_state in cls.VALID_TRANSITIONS.get(from_state, set())

    @classmethod
    def is_terminal(cls, state: WorkflowStatus) -> bool:
        """Check if a workflow status is terminal."""
        return state in cls.TERMINAL_STATES

    @classmethod
    def check_transition(cls, from_state: WorkflowStatus, to_state: WorkflowStatus) -> None:
        """
        Validate a transition.

        Raises:
            InvalidStateTransitionError: If the transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(from_state.value, to_state.value)


def compute_workflow_status_from_nodes(
    node_statuses: Iterable[NodeStatus],
) -> WorkflowStatus:
    """
    Compute the aggregate workflow status from node statuses.

    FAILED is never derived from nodes; it is set explicitly by the dispatcher.
    """
    if all(status == NodeStatus.COMPLETED for status in node_statuses):
        return WorkflowStatus.COMPLETED
    return WorkflowStatus.ACTIVE
