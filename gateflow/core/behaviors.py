"""
Node behavior hooks.

Each node owns one behavior. Hooks run synchronously inside a dispatch and
must not submit events back to the engine. Any exception they raise fails
the workflow.
"""

import logging
from abc import ABC
from typing import ClassVar, Optional

from gateflow.core.registry import TypeRegistry

logger = logging.getLogger(__name__)


class NodeBehavior(ABC):
    """
    Base class for node behaviors.

    ``on_activated`` may return an advisory string (for example a timer
    correlation id) which the dispatcher reports to the caller.
    """

    type_tag: ClassVar[str]

    def on_activated(self) -> Optional[str]:
        return None

    def on_completed(self) -> None:
        return None

    def behavior_data(self) -> Optional[str]:
        """String-encoded parameters, or None when the behavior has none."""
        return None

    @classmethod
    def from_data(cls, data: Optional[str]) -> "NodeBehavior":
        return cls()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeBehavior):
            return NotImplemented
        return (self.type_tag, self.behavior_data()) == (other.type_tag, other.behavior_data())

    def __hash__(self) -> int:
        return hash((self.type_tag, self.behavior_data()))

    def __repr__(self) -> str:
        data = self.behavior_data()
        return f"{type(self).__name__}({data!r})" if data is not None else f"{type(self).__name__}()"


behavior_registry: TypeRegistry[NodeBehavior] = TypeRegistry("behavior")


@behavior_registry.register
class EmptyBehavior(NodeBehavior):
    """Does nothing."""

    type_tag = "empty"


@behavior_registry.register
class TimerNodeBehavior(NodeBehavior):
    """
    Requests a timer when activated.

    The timer itself is started by the external collaborator; the returned
    id lets it correlate the later ``TimerEvent`` with this node's edges.
    """

    type_tag = "timer"

    def __init__(self, timer_id: str):
        self.timer_id = timer_id

    def on_activated(self) -> Optional[str]:
        logger.info(f"Timer requested: {self.timer_id}")
        return self.timer_id

    def behavior_data(self) -> Optional[str]:
        return self.timer_id

    @classmethod
    def from_data(cls, data: Optional[str]) -> "TimerNodeBehavior":
        if data is None:
            raise ValueError("timer behavior requires a timer id")
        return cls(data)


@behavior_registry.register
class FinishNodeBehavior(NodeBehavior):
    """Logs when the final node of a workflow completes."""

    type_tag = "finish"

    def on_completed(self) -> None:
        logger.info("Workflow finished")


@behavior_registry.register
class LogBehavior(NodeBehavior):
    """Logs a fixed message on activation."""

    type_tag = "log"

    def __init__(self, message: str = ""):
        self.message = message

    def on_activated(self) -> Optional[str]:
        logger.info(self.message)
        return None

    def behavior_data(self) -> Optional[str]:
        return self.message

    @classmethod
    def from_data(cls, data: Optional[str]) -> "LogBehavior":
        return cls(data or "")
