"""
Demo workflow: user activity -> timer -> finish.

Run with the in-memory store:
    python -m gateflow.demo

or against PostgreSQL (and Redis, when enabled):
    python -m gateflow.demo --postgres
"""

import argparse
import asyncio
import logging
from typing import Optional
from uuid import UUID, uuid4

from gateflow.config import get_settings
from gateflow.core.behaviors import FinishNodeBehavior, TimerNodeBehavior
from gateflow.core.conditions import TimerCondition, UserActivityCondition
from gateflow.core.events import TimerEvent, UserActivityEvent
from gateflow.core.gates import single
from gateflow.core.models import Edge, Node, Workflow, new_workflow
from gateflow.core.state_machine import NodeStatus
from gateflow.orchestrator.engine import WorkflowEngine
from gateflow.storage.base import WorkflowStore
from gateflow.storage.memory import InMemoryWorkflowStore

logger = logging.getLogger(__name__)

DEMO_TIMER_ID = "1"


def create_demo_workflow(user_id: Optional[UUID] = None) -> Workflow:
    """
    Build the three-node demo workflow.

    Node 0 starts active and waits for user activity. Node 1 requests a
    timer when activated and waits for it to fire. Node 2 finishes.
    """
    nodes = [
        Node(
            id=0,
            name="User Activity",
            status=NodeStatus.ACTIVE,
            edges=(Edge(target=1, gate=single(UserActivityCondition())),),
        ),
        Node(
            id=1,
            name="Timer",
            edges=(Edge(target=2, gate=single(TimerCondition(DEMO_TIMER_ID))),),
            behavior=TimerNodeBehavior(DEMO_TIMER_ID),
        ),
        Node(
            id=2,
            name="Finish",
            behavior=FinishNodeBehavior(),
        ),
    ]
    return new_workflow(nodes, user_id=user_id, name="demo")


async def _run(store: WorkflowStore) -> Workflow:
    engine = WorkflowEngine(store)

    user_id = uuid4()
    await engine.create_user(user_id, "demo-user")

    workflow = await engine.start_workflow(create_demo_workflow(user_id))

    results = await engine.submit_user_event(user_id, UserActivityEvent())
    for timer_id in results[workflow.id].activation_outputs.values():
        logger.info(f"Firing timer {timer_id}")
        await engine.submit_user_event(user_id, TimerEvent(timer_id=timer_id))

    workflow = await engine.get_workflow(workflow.id)
    for node in workflow.nodes:
        logger.info(f"  [{node.id}] {node.name}: {node.status.value}")
    logger.info(f"Workflow {workflow.id} is {workflow.status.value}")

    for recorded in await store.list_events(user_id):
        logger.info(f"  event {recorded.event.type} at {recorded.created_at.isoformat()}")

    return workflow


async def run_demo(use_postgres: bool = False) -> Workflow:
    """Entry point for running the demo workflow."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not use_postgres:
        return await _run(InMemoryWorkflowStore())

    from gateflow.storage.postgres import Database, PostgresWorkflowStore
    from gateflow.storage.redis import RedisCache, RedisConnection

    async with Database(settings.postgres) as database:
        await database.create_tables()
        if not settings.redis.enabled:
            return await _run(PostgresWorkflowStore(database))

        async with RedisConnection(settings.redis) as connection:
            cache = RedisCache(connection.client, ttl=settings.redis.workflow_ttl)
            return await _run(PostgresWorkflowStore(database, cache))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the gated workflow demo")
    parser.add_argument(
        "--postgres",
        action="store_true",
        help="Persist to PostgreSQL instead of memory",
    )
    args = parser.parse_args()
    asyncio.run(run_demo(use_postgres=args.postgres))


if __name__ == "__main__":
    main()
