"""
Unit tests for workflow and event encoding.
"""

import json

import pytest

from gateflow.core.behaviors import FinishNodeBehavior, LogBehavior, TimerNodeBehavior
from gateflow.core.conditions import TimerCondition, UserActivityCondition
from gateflow.core.events import TimerEvent, UserActivityEvent, event_from_record
from gateflow.core.exceptions import DecodeError
from gateflow.core.gates import all_of, any_of, negate, single, wait_for_nodes
from gateflow.core.models import Edge, Node, new_workflow
from gateflow.core.serialization import (
    deserialize,
    deserialize_event,
    serialize,
    serialize_event,
)
from gateflow.core.state_machine import NodeStatus, WorkflowStatus


@pytest.fixture
def rich_workflow():
    """Workflow using every gate variant and built-in behavior."""
    return new_workflow(
        [
            Node(
                id=0,
                name="start",
                status=NodeStatus.COMPLETED,
                edges=(Edge(target=1, gate=single(UserActivityCondition())),),
            ),
            Node(
                id=1,
                name="wait",
                status=NodeStatus.ACTIVE,
                edges=(
                    Edge(
                        target=2,
                        gate=all_of(
                            any_of(single(TimerCondition("1")), wait_for_nodes()),
                            negate(wait_for_nodes(0, 1)),
                        ),
                    ),
                ),
                behavior=TimerNodeBehavior("1"),
            ),
            Node(id=2, name="log", behavior=LogBehavior("hello")),
            Node(id=3, name="finish", behavior=FinishNodeBehavior()),
        ],
        name="rich",
    )


class TestWorkflowSerialization:
    """Tests for serialize/deserialize."""

    def test_round_trip_is_exact(self, rich_workflow):
        restored = deserialize(serialize(rich_workflow))

        assert restored.id == rich_workflow.id
        assert restored.user_id == rich_workflow.user_id
        assert restored.name == "rich"
        assert restored.status == WorkflowStatus.ACTIVE
        assert [n.id for n in restored.nodes] == [0, 1, 2, 3]
        assert [n.status for n in restored.nodes] == [n.status for n in rich_workflow.nodes]
        assert [n.edges for n in restored.nodes] == [n.edges for n in rich_workflow.nodes]
        assert [n.behavior for n in restored.nodes] == [n.behavior for n in rich_workflow.nodes]

    def test_encoding_is_byte_stable(self, rich_workflow):
        data = serialize(rich_workflow)

        assert serialize(deserialize(data)) == data

    def test_restored_conditions_and_behaviors_are_live(self, rich_workflow):
        restored = deserialize(serialize(rich_workflow))
        gate = restored.nodes[0].edges[0].gate

        assert isinstance(gate.condition, UserActivityCondition)
        assert gate.evaluate(restored.status_snapshot(), UserActivityEvent())
        assert restored.nodes[1].behavior.on_activated() == "1"

    def test_tagged_encoding(self, rich_workflow):
        payload = json.loads(serialize(rich_workflow))
        node = payload["nodes"][1]

        assert node["behavior"] == {"type": "timer", "data": "1"}
        assert node["edges"][0]["gate"]["type"] == "And"
        assert payload["nodes"][0]["edges"][0]["gate"]["condition"] == {"type": "user_activity", "data": None}

    def test_accepts_str(self, two_node_workflow):
        restored = deserialize(serialize(two_node_workflow).decode("utf-8"))

        assert restored.id == two_node_workflow.id

    def test_custom_types_round_trip(self, registered_test_types, fixed, recording):
        workflow = new_workflow([
            Node(
                id=0,
                status=NodeStatus.ACTIVE,
                edges=(Edge(target=1, gate=single(fixed(True))),),
                behavior=recording("out"),
            ),
            Node(id=1),
        ])

        restored = deserialize(serialize(workflow))

        assert restored.nodes[0].edges[0].gate.condition == fixed(True)
        assert restored.nodes[0].behavior == recording("out")


class TestDecodeFailures:
    """Decoding never substitutes placeholders for bad data."""

    def test_malformed_json(self):
        with pytest.raises(DecodeError):
            deserialize(b"{not json")

    def test_unknown_condition_tag(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][0]["edges"][0]["gate"]["condition"]["type"] = "weather"

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_unknown_behavior_tag(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][1]["behavior"] = {"type": "teleport", "data": None}

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_unregistered_custom_tag(self, fixed):
        workflow = new_workflow([
            Node(id=0, status=NodeStatus.ACTIVE, edges=(Edge(target=1, gate=single(fixed(True))),)),
            Node(id=1),
        ])

        with pytest.raises(DecodeError):
            deserialize(serialize(workflow))

    def test_invalid_graph(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][0]["edges"][0]["target"] = 7

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_missing_timer_id(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][0]["edges"][0]["gate"]["condition"] = {"type": "timer", "data": None}

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_non_string_condition_tag(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][0]["edges"][0]["gate"]["condition"]["type"] = ["user_activity"]

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_object_condition_tag(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][0]["edges"][0]["gate"]["condition"]["type"] = {"name": "user_activity"}

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))

    def test_non_string_behavior_data(self, two_node_workflow):
        payload = json.loads(serialize(two_node_workflow))
        payload["nodes"][1]["behavior"] = {"type": "timer", "data": 5}

        with pytest.raises(DecodeError):
            deserialize(json.dumps(payload))


class TestEventSerialization:
    """Tests for event encoding."""

    def test_timer_event_round_trip(self):
        event = TimerEvent(timer_id="42")

        assert deserialize_event(serialize_event(event)) == event

    def test_user_activity_round_trip(self):
        assert isinstance(deserialize_event(serialize_event(UserActivityEvent())), UserActivityEvent)

    def test_unknown_event_type(self):
        with pytest.raises(DecodeError):
            deserialize_event(b'{"type": "earthquake"}')

    def test_event_from_record(self):
        assert event_from_record("timer", {"timer_id": "1"}) == TimerEvent(timer_id="1")
        assert event_from_record("user_activity", None) == UserActivityEvent()
