"""
Unit tests for domain models.
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from gateflow.core.behaviors import EmptyBehavior, TimerNodeBehavior
from gateflow.core.conditions import UserActivityCondition
from gateflow.core.dispatcher import process_event
from gateflow.core.exceptions import InvalidStateTransitionError
from gateflow.core.gates import single
from gateflow.core.models import DispatchResult, Edge, Node, Workflow, new_workflow
from gateflow.core.state_machine import NodeStatus, WorkflowStatus


class TestNode:
    """Tests for Node model."""

    def test_defaults(self):
        node = Node(id=3)

        assert node.status == NodeStatus.NOT_STARTED
        assert node.edges == ()
        assert isinstance(node.behavior, EmptyBehavior)

    def test_negative_id_rejected(self):
        with pytest.raises(ValidationError):
            Node(id=-1)

    def test_behavior_from_tagged_dict(self):
        node = Node(id=0, behavior={"type": "timer", "data": "5"})

        assert node.behavior == TimerNodeBehavior("5")

    def test_behavior_requires_tag(self):
        with pytest.raises(ValidationError):
            Node(id=0, behavior={"data": "5"})

    def test_edges_are_immutable(self):
        edge = Edge(target=1, gate=single(UserActivityCondition()))

        with pytest.raises(ValidationError):
            edge.target = 2


class TestWorkflow:
    """Tests for Workflow accessors and mutators."""

    def test_accessors(self, two_node_workflow):
        assert two_node_workflow.get_node(1).name == "B"
        assert two_node_workflow.get_node(2) is None
        assert two_node_workflow.node_status(0) == NodeStatus.ACTIVE
        assert len(two_node_workflow.edges(0)) == 1
        assert two_node_workflow.active_node_ids() == [0]
        assert two_node_workflow.status_snapshot() == (NodeStatus.ACTIVE, NodeStatus.NOT_STARTED)

    def test_unknown_node_raises_key_error(self, two_node_workflow):
        with pytest.raises(KeyError):
            two_node_workflow.node_status(9)

    def test_set_status_forward(self, two_node_workflow):
        two_node_workflow.set_status(1, NodeStatus.ACTIVE)

        assert two_node_workflow.active_node_ids() == [0, 1]

    def test_set_status_backward_rejected(self, two_node_workflow):
        with pytest.raises(InvalidStateTransitionError):
            two_node_workflow.set_status(0, NodeStatus.NOT_STARTED)

        assert two_node_workflow.node_status(0) == NodeStatus.ACTIVE

    def test_snapshot_is_independent_of_later_changes(self, two_node_workflow):
        snapshot = two_node_workflow.status_snapshot()

        two_node_workflow.set_status(1, NodeStatus.ACTIVE)

        assert snapshot[1] == NodeStatus.NOT_STARTED

    def test_workflow_status_is_terminal_once_set(self, two_node_workflow):
        two_node_workflow.set_workflow_status(WorkflowStatus.FAILED)

        assert two_node_workflow.is_terminal
        with pytest.raises(InvalidStateTransitionError):
            two_node_workflow.set_workflow_status(WorkflowStatus.COMPLETED)

    def test_name_length_limit(self):
        with pytest.raises(ValidationError):
            Workflow(name="x" * 256, nodes=[Node(id=0, status=NodeStatus.ACTIVE)])

    def test_workflows_built_from_one_node_list_are_independent(self, user_activity):
        nodes = [
            Node(id=0, status=NodeStatus.ACTIVE, edges=(Edge(target=1, gate=single(UserActivityCondition())),)),
            Node(id=1),
        ]
        first = new_workflow(nodes)
        second = new_workflow(nodes)

        process_event(first, user_activity)

        assert second.nodes[0] is not first.nodes[0]
        assert first.status_snapshot() == (NodeStatus.COMPLETED, NodeStatus.COMPLETED)
        assert second.status_snapshot() == (NodeStatus.ACTIVE, NodeStatus.NOT_STARTED)
        assert nodes[0].status == NodeStatus.ACTIVE
        assert second.status == WorkflowStatus.ACTIVE

    def test_behavior_instances_are_kept(self, recording):
        behavior = recording()

        workflow = new_workflow([Node(id=0, status=NodeStatus.ACTIVE, behavior=behavior)])

        assert workflow.nodes[0].behavior is behavior

    def test_new_workflow_keeps_given_ids(self):
        user_id, workflow_id = uuid4(), uuid4()

        workflow = new_workflow(
            [Node(id=0, status=NodeStatus.ACTIVE)],
            user_id=user_id,
            name="named",
            workflow_id=workflow_id,
        )

        assert workflow.id == workflow_id
        assert workflow.user_id == user_id
        assert workflow.name == "named"


class TestDispatchResult:
    """Tests for DispatchResult defaults."""

    def test_empty_result(self):
        result = DispatchResult()

        assert result.newly_activated == []
        assert result.newly_completed == []
        assert result.activation_outputs == {}
        assert not result.completed
