"""
Pytest fixtures and configuration for tests.
"""

from typing import Optional
from uuid import uuid4

import pytest

from gateflow.config import Environment, Settings
from gateflow.core.behaviors import NodeBehavior, behavior_registry
from gateflow.core.conditions import Condition, UserActivityCondition, condition_registry
from gateflow.core.events import Event, TimerEvent, UserActivityEvent
from gateflow.core.gates import single
from gateflow.core.models import Edge, Node, Workflow, new_workflow
from gateflow.core.state_machine import NodeStatus
from gateflow.orchestrator.engine import WorkflowEngine
from gateflow.storage.memory import InMemoryWorkflowStore


class FixedCondition(Condition):
    """Condition with a constant result, independent of the event."""

    type_tag = "fixed"

    def __init__(self, value: bool):
        self.value = value

    def evaluate(self, event: Event) -> bool:
        return self.value

    def condition_data(self) -> Optional[str]:
        return "true" if self.value else "false"

    @classmethod
    def from_data(cls, data: Optional[str]) -> "FixedCondition":
        return cls(data == "true")


class RecordingBehavior(NodeBehavior):
    """Records hook calls; optionally returns an activation output."""

    type_tag = "recording"

    def __init__(self, output: Optional[str] = None):
        self.output = output
        self.calls: list[str] = []

    def on_activated(self) -> Optional[str]:
        self.calls.append("activated")
        return self.output

    def on_completed(self) -> None:
        self.calls.append("completed")

    def behavior_data(self) -> Optional[str]:
        return self.output

    @classmethod
    def from_data(cls, data: Optional[str]) -> "RecordingBehavior":
        return cls(data)


class FailingBehavior(NodeBehavior):
    """Raises from the configured hook."""

    type_tag = "failing"

    def __init__(self, hook: str = "on_activated"):
        self.hook = hook

    def on_activated(self) -> Optional[str]:
        if self.hook == "on_activated":
            raise RuntimeError("activation hook exploded")
        return None

    def on_completed(self) -> None:
        if self.hook == "on_completed":
            raise RuntimeError("completion hook exploded")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        environment=Environment.TEST,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def registered_test_types():
    """Register the test condition and behaviors for serialization."""
    condition_registry.register(FixedCondition)
    behavior_registry.register(RecordingBehavior)
    behavior_registry.register(FailingBehavior)
    yield
    condition_registry.unregister(FixedCondition.type_tag)
    behavior_registry.unregister(RecordingBehavior.type_tag)
    behavior_registry.unregister(FailingBehavior.type_tag)


@pytest.fixture
def fixed():
    """Factory for constant conditions."""
    return FixedCondition


@pytest.fixture
def recording():
    """Factory for recording behaviors."""
    return RecordingBehavior


@pytest.fixture
def failing():
    """Factory for failing behaviors."""
    return FailingBehavior


@pytest.fixture
def user_activity() -> UserActivityEvent:
    return UserActivityEvent()


@pytest.fixture
def timer_event() -> TimerEvent:
    return TimerEvent(timer_id="1")


@pytest.fixture
def two_node_workflow() -> Workflow:
    """A (active) -> B, gated on user activity."""
    nodes = [
        Node(
            id=0,
            name="A",
            status=NodeStatus.ACTIVE,
            edges=(Edge(target=1, gate=single(UserActivityCondition())),),
        ),
        Node(id=1, name="B"),
    ]
    return new_workflow(nodes, name="two-node")


@pytest.fixture
def chain_workflow() -> Workflow:
    """A (active) -> B -> C, every edge gated on user activity."""
    gate = single(UserActivityCondition())
    nodes = [
        Node(id=0, name="A", status=NodeStatus.ACTIVE, edges=(Edge(target=1, gate=gate),)),
        Node(id=1, name="B", edges=(Edge(target=2, gate=gate),)),
        Node(id=2, name="C"),
    ]
    return new_workflow(nodes, name="chain")


@pytest.fixture
def memory_store() -> InMemoryWorkflowStore:
    return InMemoryWorkflowStore()


@pytest.fixture
def engine(memory_store: InMemoryWorkflowStore) -> WorkflowEngine:
    return WorkflowEngine(memory_store)


@pytest.fixture
def user_id():
    return uuid4()
