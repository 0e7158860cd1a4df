"""
Workflow graph validation.

Checks node identity, edge targets and gate trees when a workflow is built,
so that malformed graphs are reported before any event is dispatched.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence

from gateflow.core.gates import Gate, WaitForNodesGate
from gateflow.core.state_machine import NodeStatus

if TYPE_CHECKING:
    from gateflow.core.models import Node

# Gate evaluation recurses; nesting beyond this is rejected at build time.
MAX_GATE_DEPTH = 64


@dataclass
class ValidationError:
    """Represents a single validation error."""

    code: str
    message: str
    node_id: Optional[int] = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    """Result of graph validation."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def add_error(
        self,
        code: str,
        message: str,
        node_id: Optional[int] = None,
        **details: Any,
    ) -> None:
        """Add a validation error."""
        self.errors.append(ValidationError(code, message, node_id, details))
        self.is_valid = False

    def add_warning(
        self,
        code: str,
        message: str,
        node_id: Optional[int] = None,
        **details: Any,
    ) -> None:
        """Add a validation warning."""
        self.warnings.append(ValidationError(code, message, node_id, details))


class GraphValidator:
    """
    Validates workflow graph structure.

    Errors:
    - EMPTY_WORKFLOW, NODE_ID_MISMATCH, INVALID_EDGE_TARGET
    - INVALID_WAIT_REFERENCE, GATE_CYCLE, GATE_TOO_DEEP

    Warnings:
    - SELF_LOOP, NO_START_NODE, UNREACHABLE_NODES
    """

    def __init__(self, nodes: Sequence["Node"], max_gate_depth: int = MAX_GATE_DEPTH):
        self.nodes = nodes
        self.max_gate_depth = max_gate_depth

    def validate(self) -> ValidationResult:
        """
        Perform full validation of the graph.

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        if not self.nodes:
            result.add_error(
                code="EMPTY_WORKFLOW",
                message="Workflow must contain at least one node",
            )
            return result

        self._validate_node_ids(result)
        self._validate_edges(result)
        self._check_reachability(result)

        return result

    def _validate_node_ids(self, result: ValidationResult) -> None:
        """Node ids must match their position in the node list."""
        for index, node in enumerate(self.nodes):
            if node.id != index:
                result.add_error(
                    code="NODE_ID_MISMATCH",
                    message=f"Node at position {index} has id {node.id}",
                    node_id=node.id,
                    position=index,
                )

    def _validate_edges(self, result: ValidationResult) -> None:
        """Check edge targets and every gate tree."""
        node_count = len(self.nodes)

        for node in self.nodes:
            for edge_index, edge in enumerate(node.edges):
                if edge.target >= node_count:
                    result.add_error(
                        code="INVALID_EDGE_TARGET",
                        message=f"Node {node.id} edge {edge_index} targets non-existent node {edge.target}",
                        node_id=node.id,
                        edge_index=edge_index,
                        target=edge.target,
                    )
                elif edge.target == node.id:
                    result.add_warning(
                        code="SELF_LOOP",
                        message=f"Node {node.id} edge {edge_index} targets its own node and never activates it",
                        node_id=node.id,
                        edge_index=edge_index,
                    )

                self._validate_gate(result, node.id, edge_index, edge.gate)

    def _validate_gate(
        self,
        result: ValidationResult,
        node_id: int,
        edge_index: int,
        gate: Gate,
    ) -> None:
        """
        Walk a gate tree depth-first without recursion.

        ``path`` holds the gates on the current branch; meeting one of them
        again means the tree refers back to an ancestor.
        """
        node_count = len(self.nodes)
        path: set[int] = set()
        stack: list[tuple[Gate, int, bool]] = [(gate, 1, False)]

        while stack:
            current, depth, leaving = stack.pop()

            if leaving:
                path.discard(id(current))
                continue

            if id(current) in path:
                result.add_error(
                    code="GATE_CYCLE",
                    message=f"Gate on node {node_id} edge {edge_index} contains a cycle",
                    node_id=node_id,
                    edge_index=edge_index,
                )
                return

            if depth > self.max_gate_depth:
                result.add_error(
                    code="GATE_TOO_DEEP",
                    message=(
                        f"Gate on node {node_id} edge {edge_index} is nested deeper "
                        f"than {self.max_gate_depth} levels"
                    ),
                    node_id=node_id,
                    edge_index=edge_index,
                )
                return

            if isinstance(current, WaitForNodesGate):
                invalid = sorted({ref for ref in current.nodes if ref >= node_count})
                if invalid:
                    result.add_error(
                        code="INVALID_WAIT_REFERENCE",
                        message=(
                            f"Gate on node {node_id} edge {edge_index} waits for "
                            f"non-existent nodes {invalid}"
                        ),
                        node_id=node_id,
                        edge_index=edge_index,
                        references=invalid,
                    )

            path.add(id(current))
            stack.append((current, depth, True))
            for child in reversed(current.children()):
                stack.append((child, depth + 1, False))

    def _check_reachability(self, result: ValidationResult) -> None:
        """Warn about nodes no start node can ever activate."""
        if not result.is_valid:
            return

        roots = [node.id for node in self.nodes if node.status != NodeStatus.NOT_STARTED]
        if not roots:
            result.add_warning(
                code="NO_START_NODE",
                message="No node is active; no event can make progress",
            )
            return

        reachable = set(roots)
        queue = deque(roots)

        while queue:
            node_id = queue.popleft()
            for edge in self.nodes[node_id].edges:
                if edge.target not in reachable:
                    reachable.add(edge.target)
                    queue.append(edge.target)

        unreachable = [node.id for node in self.nodes if node.id not in reachable]
        if unreachable:
            result.add_warning(
                code="UNREACHABLE_NODES",
                message=f"Nodes {unreachable} are not reachable from any start node",
                unreachable_nodes=unreachable,
            )


def validate_graph(nodes: Sequence["Node"]) -> ValidationResult:
    """Validate a node list."""
    return GraphValidator(nodes).validate()
