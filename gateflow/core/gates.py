"""
Gate algebra: boolean expression trees guarding edges.

Gates are immutable pydantic models discriminated by ``type`` so they
round-trip through JSON. Evaluation is pure: it reads the event and a
snapshot of node statuses, and nothing else.

Note: ``WaitForNodes([])`` is vacuously true, so an edge guarded only by an
empty wait always fires.
"""

from typing import Annotated, Any, Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator

from gateflow.core.conditions import Condition, condition_registry
from gateflow.core.events import Event
from gateflow.core.state_machine import NodeStatus

# Node statuses indexed by node id
StatusSnapshot = Sequence[NodeStatus]


def _encode_condition(condition: Condition) -> dict[str, Any]:
    return {"type": condition.type_tag, "data": condition.condition_data()}


def _decode_condition(value: Any) -> Condition:
    if isinstance(value, Condition):
        return value
    return condition_registry.decode(value)


ConditionField = Annotated[
    Condition,
    PlainValidator(_decode_condition),
    PlainSerializer(_encode_condition),
]


class SingleGate(BaseModel):
    """Leaf gate: one condition evaluated against the event."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["Single"] = "Single"
    condition: ConditionField

    def evaluate(self, snapshot: StatusSnapshot, event: Event) -> bool:
        return self.condition.evaluate(event)

    def children(self) -> tuple["Gate", ...]:
        return ()


class AndGate(BaseModel):
    """True iff every sub-gate is true. Short-circuits left to right."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["And"] = "And"
    gates: tuple["Gate", ...] = ()

    def evaluate(self, snapshot: StatusSnapshot, event: Event) -> bool:
        return all(gate.evaluate(snapshot, event) for gate in self.gates)

    def children(self) -> tuple["Gate", ...]:
        return self.gates


class OrGate(BaseModel):
    """True iff any sub-gate is true. Short-circuits left to right."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["Or"] = "Or"
    gates: tuple["Gate", ...] = ()

    def evaluate(self, snapshot: StatusSnapshot, event: Event) -> bool:
        return any(gate.evaluate(snapshot, event) for gate in self.gates)

    def children(self) -> tuple["Gate", ...]:
        return self.gates


class NotGate(BaseModel):
    """True iff its sub-gate is false."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["Not"] = "Not"
    gate: "Gate"

    def evaluate(self, snapshot: StatusSnapshot, event: Event) -> bool:
        return not self.gate.evaluate(snapshot, event)

    def children(self) -> tuple["Gate", ...]:
        return (self.gate,)


class WaitForNodesGate(BaseModel):
    """True iff every listed node is COMPLETED in the snapshot."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["WaitForNodes"] = "WaitForNodes"
    nodes: tuple[Annotated[int, Field(ge=0)], ...] = ()

    def evaluate(self, snapshot: StatusSnapshot, event: Event) -> bool:
        return all(snapshot[node_id] == NodeStatus.COMPLETED for node_id in self.nodes)

    def children(self) -> tuple["Gate", ...]:
        return ()


Gate = Annotated[
    Union[SingleGate, AndGate, OrGate, NotGate, WaitForNodesGate],
    Field(discriminator="type"),
]

AndGate.model_rebuild()
OrGate.model_rebuild()
NotGate.model_rebuild()


def evaluate_gate(gate: Gate, snapshot: StatusSnapshot, event: Event) -> bool:
    """Evaluate a gate against an event and a node status snapshot."""
    return gate.evaluate(snapshot, event)


# ==================== Builders ====================

def single(condition: Condition) -> SingleGate:
    return SingleGate(condition=condition)


def all_of(*gates: Gate) -> AndGate:
    return AndGate(gates=gates)


def any_of(*gates: Gate) -> OrGate:
    return OrGate(gates=gates)


def negate(gate: Gate) -> NotGate:
    return NotGate(gate=gate)


def wait_for_nodes(*node_ids: int) -> WaitForNodesGate:
    return WaitForNodesGate(nodes=node_ids)
