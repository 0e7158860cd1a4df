"""
Event dispatch: drives one event through a workflow graph.

Algorithm for one dispatch pass:
1. Snapshot node statuses. Every gate in this pass is evaluated against
   the snapshot, so results never depend on the order nodes are visited.
2. Collect active nodes in node order.
3. Process each active node depth-first:
   a. No outgoing edges: complete it.
   b. Evaluate edges in declaration order.
   c. A true edge whose target is still NOT_STARTED activates the target,
      runs its on_activated hook, and processes the target fully before
      the next sibling edge.
   d. Once all edges are evaluated, complete the node if every gate was
      true and at least one target was freshly activated.
4. Complete the workflow if every node is completed.

The cascade uses an explicit stack instead of recursion. The dispatcher
holds no locks: callers must not dispatch concurrently on one workflow.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from gateflow.core.events import Event
from gateflow.core.exceptions import (
    CascadeLimitError,
    DispatchError,
    GateflowError,
    HookExecutionError,
)
from gateflow.core.models import DispatchResult, NodeId, Workflow
from gateflow.core.state_machine import NodeStatus, WorkflowStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_CASCADE_DEPTH = 10_000


@dataclass
class _Frame:
    """Progress through one node's outgoing edges."""

    node_id: NodeId
    next_edge: int = 0
    all_gates_true: bool = True
    activated_any: bool = False


class WorkflowDispatcher:
    """
    Applies events to workflows.

    Invariant violations and hook failures abort the dispatch: the workflow
    is marked FAILED and a DispatchError is raised. Status changes made
    before the failure are kept.
    """

    def __init__(self, max_cascade_depth: int = DEFAULT_MAX_CASCADE_DEPTH):
        self.max_cascade_depth = max_cascade_depth

    def process_event(self, workflow: Workflow, event: Event) -> DispatchResult:
        """
        Dispatch one event.

        Args:
            workflow: Workflow to advance (mutated in place)
            event: Incoming event

        Returns:
            DispatchResult describing the nodes this call changed

        Raises:
            DispatchError: If a hook fails or an invariant is violated
        """
        result = DispatchResult()

        if workflow.is_terminal:
            logger.debug(f"Workflow {workflow.id} is {workflow.status.value}, ignoring {event.type} event")
            result.completed = workflow.status == WorkflowStatus.COMPLETED
            return result

        snapshot = workflow.status_snapshot()

        try:
            for node_id in workflow.active_node_ids():
                self._cascade(workflow, node_id, snapshot, event, result)
        except DispatchError as e:
            self._fail(workflow, e)
            raise
        except GateflowError as e:
            error = DispatchError(f"Dispatch aborted on workflow {workflow.id}: {e}")
            self._fail(workflow, error)
            raise error from e

        if workflow.is_complete:
            workflow.set_workflow_status(WorkflowStatus.COMPLETED)
            logger.info(f"Workflow {workflow.id} completed")

        result.completed = workflow.status == WorkflowStatus.COMPLETED
        return result

    def _cascade(
        self,
        workflow: Workflow,
        root_id: NodeId,
        snapshot: tuple[NodeStatus, ...],
        event: Event,
        result: DispatchResult,
    ) -> None:
        """Process one active node and everything it activates."""
        stack: list[_Frame] = [_Frame(root_id)]

        while stack:
            frame = stack[-1]
            edges = workflow.edges(frame.node_id)

            if not edges:
                stack.pop()
                self._complete(workflow, frame.node_id, result)
                continue

            if frame.next_edge < len(edges):
                edge = edges[frame.next_edge]
                frame.next_edge += 1

                if not edge.gate.evaluate(snapshot, event):
                    frame.all_gates_true = False
                    continue

                if workflow.node_status(edge.target) != NodeStatus.NOT_STARTED:
                    continue

                self._activate(workflow, edge.target, result)
                frame.activated_any = True

                if len(stack) >= self.max_cascade_depth:
                    raise CascadeLimitError(
                        f"Cascade on workflow {workflow.id} exceeded depth {self.max_cascade_depth}",
                        node_id=edge.target,
                    )
                stack.append(_Frame(edge.target))
                continue

            stack.pop()
            if frame.all_gates_true and frame.activated_any:
                self._complete(workflow, frame.node_id, result)

    def _activate(self, workflow: Workflow, node_id: NodeId, result: DispatchResult) -> None:
        workflow.set_status(node_id, NodeStatus.ACTIVE)
        result.newly_activated.append(node_id)
        logger.debug(f"Node {node_id} activated in workflow {workflow.id}")

        node = workflow.nodes[node_id]
        try:
            output = node.behavior.on_activated()
        except Exception as e:
            raise HookExecutionError(node_id, "on_activated", e) from e

        if output is not None:
            result.activation_outputs[node_id] = output

    def _complete(self, workflow: Workflow, node_id: NodeId, result: DispatchResult) -> None:
        workflow.set_status(node_id, NodeStatus.COMPLETED)
        result.newly_completed.append(node_id)
        logger.debug(f"Node {node_id} completed in workflow {workflow.id}")

        node = workflow.nodes[node_id]
        try:
            node.behavior.on_completed()
        except Exception as e:
            raise HookExecutionError(node_id, "on_completed", e) from e

    def _fail(self, workflow: Workflow, error: DispatchError) -> None:
        logger.error(f"Dispatch failed for workflow {workflow.id}: {error}")
        workflow.set_workflow_status(WorkflowStatus.FAILED)


_default_dispatcher: Optional[WorkflowDispatcher] = None


def process_event(workflow: Workflow, event: Event) -> DispatchResult:
    """Dispatch one event with the default dispatcher."""
    global _default_dispatcher

    if _default_dispatcher is None:
        _default_dispatcher = WorkflowDispatcher()

    return _default_dispatcher.process_event(workflow, event)
