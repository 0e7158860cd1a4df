"""Core domain models and business logic."""

from gateflow.core.behaviors import (
    EmptyBehavior,
    FinishNodeBehavior,
    LogBehavior,
    NodeBehavior,
    TimerNodeBehavior,
    behavior_registry,
)
from gateflow.core.conditions import (
    Condition,
    TimerCondition,
    UserActivityCondition,
    condition_registry,
)
from gateflow.core.dispatcher import WorkflowDispatcher, process_event
from gateflow.core.events import Event, TimerEvent, UserActivityEvent
from gateflow.core.gates import (
    AndGate,
    Gate,
    NotGate,
    OrGate,
    SingleGate,
    WaitForNodesGate,
    all_of,
    any_of,
    evaluate_gate,
    negate,
    single,
    wait_for_nodes,
)
from gateflow.core.graph import GraphValidator, ValidationResult
from gateflow.core.models import (
    DispatchResult,
    Edge,
    Node,
    NodeId,
    Workflow,
    WorkflowSummary,
    new_workflow,
)
from gateflow.core.serialization import (
    deserialize,
    deserialize_event,
    serialize,
    serialize_event,
)
from gateflow.core.state_machine import NodeStatus, WorkflowStatus

__all__ = [
    "EmptyBehavior",
    "FinishNodeBehavior",
    "LogBehavior",
    "NodeBehavior",
    "TimerNodeBehavior",
    "behavior_registry",
    "Condition",
    "TimerCondition",
    "UserActivityCondition",
    "condition_registry",
    "WorkflowDispatcher",
    "process_event",
    "Event",
    "TimerEvent",
    "UserActivityEvent",
    "AndGate",
    "Gate",
    "NotGate",
    "OrGate",
    "SingleGate",
    "WaitForNodesGate",
    "all_of",
    "any_of",
    "evaluate_gate",
    "negate",
    "single",
    "wait_for_nodes",
    "GraphValidator",
    "ValidationResult",
    "DispatchResult",
    "Edge",
    "Node",
    "NodeId",
    "Workflow",
    "WorkflowSummary",
    "new_workflow",
    "deserialize",
    "deserialize_event",
    "serialize",
    "serialize_event",
    "NodeStatus",
    "WorkflowStatus",
]
