"""
Event Actions Persistence

Storage collaborator interfaces and their SQLAlchemy implementation.
"""

from eventactions.persistence.models import (
    EventActionModel,
    EventActionRegistration,
    EventActionsBase,
    EventModel,
)
from eventactions.persistence.repo import SQLEventActionsStore
from eventactions.persistence.store import EventActionsStore, EventStore

__all__ = [
    "EventActionModel",
    "EventActionRegistration",
    "EventActionsBase",
    "EventActionsStore",
    "EventModel",
    "EventStore",
    "SQLEventActionsStore",
]
