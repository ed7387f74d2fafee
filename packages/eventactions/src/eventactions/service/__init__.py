"""
Event Actions Service Layer

Registries over the storage collaborator and the publish dispatcher.
"""

from eventactions.service.bootstrap import EventActionsServices, provide_services
from eventactions.service.dispatcher import Dispatcher
from eventactions.service.registry import ActionRegistry, EventRegistry

__all__ = [
    "ActionRegistry",
    "Dispatcher",
    "EventActionsServices",
    "EventRegistry",
    "provide_services",
]
