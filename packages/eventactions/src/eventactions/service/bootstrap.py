"""
Service wiring.

Builds the store, registries and dispatcher for one database session and
registers the usage metrics producer.
"""

import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.orm import Session

from basecore.settings import Settings, get_settings
from eventactions.delivery.executor import ActionExecutor
from eventactions.metrics import UsageStats
from eventactions.persistence.repo import SQLEventActionsStore
from eventactions.service.dispatcher import Dispatcher
from eventactions.service.registry import ActionRegistry, EventRegistry

logger = logging.getLogger(__name__)


@dataclass
class EventActionsServices:
    events: EventRegistry
    actions: ActionRegistry
    dispatcher: Dispatcher
    executor: ActionExecutor

    async def aclose(self) -> None:
        await self.executor.aclose()


def provide_services(
    db: Session,
    settings: Settings | None = None,
    usage_stats: UsageStats | None = None,
    client: httpx.AsyncClient | None = None,
) -> EventActionsServices:
    """
    Wire the event actions services.

    Args:
        db: Database session backing the store
        settings: Settings (defaults to get_settings())
        usage_stats: Usage metrics collaborator to register with
        client: Shared HTTP client (created from settings if omitted)
    """
    settings = settings or get_settings()

    logger.info("Registering event actions", extra={"workers": settings.EVENTACTIONS_WORKERS})

    store = SQLEventActionsStore(db, encryption_key=settings.EVENTACTIONS_ENCRYPTION_KEY)
    if usage_stats is not None:
        usage_stats.register_metrics_func(store.get_usage_metrics)

    actions = ActionRegistry(store)
    executor = ActionExecutor(client=client, timeout=settings.EVENTACTIONS_ACTION_TIMEOUT)

    return EventActionsServices(
        events=EventRegistry(store),
        actions=actions,
        dispatcher=Dispatcher(actions, executor, workers=settings.EVENTACTIONS_WORKERS),
        executor=executor,
    )
