"""
Event Dispatcher

Publishes an event to every action subscribed to it:

1. Resolve subscribed actions (failure aborts the publish)
2. Pre-fill a queue with the actions
3. Run a fixed pool of worker tasks draining the queue
4. Each worker builds and executes its actions, recording an outcome
5. Join the pool, aggregate outcomes and log the summary

Action failures are contained: they are logged and counted, never raised.
"""

import asyncio
import logging
import time
from typing import Any, Protocol

from eventactions.contracts.envelope import PublishEnvelope
from eventactions.contracts.types import (
    ActionOutcome,
    ActionState,
    EventActionDTO,
    PublishSummary,
    RunResult,
)
from eventactions.delivery.builders import get_request_builder
from eventactions.delivery.executor import ActionExecutor
from eventactions.errors import EventActionError, ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 3

# Closes the queue for one worker
_STOP = None


class ActionResolver(Protocol):
    def get_actions_by_event(self, org_id: int, event_name: str) -> list[EventActionDTO]: ...


class Dispatcher:
    """
    Fans published events out to their subscribed actions.

    At most `workers` actions execute at the same time within one publish.
    """

    def __init__(
        self,
        resolver: ActionResolver,
        executor: ActionExecutor,
        workers: int = DEFAULT_WORKERS,
    ):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.resolver = resolver
        self.executor = executor
        self.workers = workers

    async def publish(self, org_id: int, event_name: str, payload: Any) -> PublishSummary:
        """
        Publish an event to all subscribed actions and wait for them.

        Raises:
            ResolutionError: subscribed actions could not be retrieved
        """
        try:
            actions = list(self.resolver.get_actions_by_event(org_id, event_name))
        except Exception as e:
            logger.error(
                "Failed to retrieve event actions by registered event",
                extra={"event": event_name, "org_id": org_id, "error": str(e)},
            )
            if isinstance(e, ResolutionError):
                raise
            raise ResolutionError(
                f"cannot resolve actions for event {event_name}: {e}",
                details={"event": event_name, "org_id": org_id},
            ) from e

        envelope = PublishEnvelope(event_name=event_name, org_id=org_id, payload=payload)
        start = time.monotonic()

        num_workers = min(self.workers, len(actions))
        outcomes: list[ActionOutcome] = []

        if actions:
            queue: asyncio.Queue[EventActionDTO | None] = asyncio.Queue(maxsize=len(actions) + num_workers)
            for action in actions:
                queue.put_nowait(action)
            for _ in range(num_workers):
                queue.put_nowait(_STOP)

            # Cancelling publish cancels every worker and its in-flight request
            results = await asyncio.gather(
                *(self._worker(queue, envelope) for _ in range(num_workers))
            )
            for worker_outcomes in results:
                outcomes.extend(worker_outcomes)

        summary = PublishSummary(
            event_name=event_name,
            org_id=org_id,
            actions=len(actions),
            workers=num_workers,
            duration=time.monotonic() - start,
            outcomes=outcomes,
        )

        logger.info(
            "Event published successfully",
            extra={
                "event": event_name,
                "org_id": org_id,
                "actions": summary.actions,
                "workers": summary.workers,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "duration_ms": round(summary.duration * 1000, 2),
            },
        )

        return summary

    async def _worker(
        self,
        queue: "asyncio.Queue[EventActionDTO | None]",
        envelope: PublishEnvelope,
    ) -> list[ActionOutcome]:
        outcomes: list[ActionOutcome] = []
        while True:
            action = await queue.get()
            if action is _STOP:
                return outcomes
            outcomes.append(await self._run_one(action, envelope))

    async def _run_one(self, action: EventActionDTO, envelope: PublishEnvelope) -> ActionOutcome:
        log_extra = {"action": action.name, "event": envelope.event_name, "org_id": envelope.org_id}

        try:
            result = await self._execute(action, envelope)
        except EventActionError as e:
            logger.error(
                "Failed running event action",
                extra={**log_extra, "error": str(e), "error_code": e.code},
            )
            return ActionOutcome(action_name=action.name, state=ActionState.FAILED, error=e)
        except Exception as e:
            logger.error(
                "Unexpected error running event action",
                extra={**log_extra, "error": str(e)},
                exc_info=True,
            )
            return ActionOutcome(
                action_name=action.name,
                state=ActionState.FAILED,
                error=EventActionError(str(e), code="UNEXPECTED_ERROR"),
            )

        if result.ok:
            logger.info("Event action ran", extra={**log_extra, "status_code": result.status_code})
        else:
            logger.warning(
                "Event action returned error status",
                extra={**log_extra, "status_code": result.status_code, "body": result.body[:200]},
            )

        return ActionOutcome(action_name=action.name, state=ActionState.SUCCEEDED, result=result)

    async def _execute(self, action: EventActionDTO, envelope: PublishEnvelope) -> RunResult:
        logger.debug("Building request", extra={"action": action.name, "state": ActionState.BUILDING.value})
        request = get_request_builder(action.type)(envelope, action)

        logger.debug("Executing request", extra={"action": action.name, "state": ActionState.EXECUTING.value})
        return await self.executor.execute(request)

    async def run_event_action(
        self,
        action: EventActionDTO,
        event_name: str,
        payload: Any,
    ) -> RunResult:
        """
        Run a single action outside of a publish.

        Raises:
            EventActionError: the request could not be built or executed
        """
        envelope = PublishEnvelope(event_name=event_name, org_id=action.org_id, payload=payload)
        return await self._execute(action, envelope)
