"""
Storage Collaborator Interfaces

The engine never owns event or action definitions; it reaches them
through these interfaces. Implementations: SQLEventActionsStore.
"""

from abc import ABC, abstractmethod
from typing import Any

from eventactions.contracts.forms import CreateEventActionForm, RegisterEventForm
from eventactions.contracts.types import EventActionDTO, EventDTO


class EventStore(ABC):
    """Registered event names."""

    @abstractmethod
    def create_event(self, form: RegisterEventForm) -> EventDTO:
        """
        Register an event.

        Raises:
            DuplicateNameError: an event with this name exists
        """
        ...

    @abstractmethod
    def list_events(self, org_id: int) -> list[EventDTO]:
        """List events of an organization, ordered by name."""
        ...

    @abstractmethod
    def delete_event(self, event_name: str) -> None:
        """
        Delete an event by name.

        Raises:
            NotFoundError: no such event
        """
        ...


class EventActionsStore(ABC):
    """Event action definitions and their event subscriptions."""

    @abstractmethod
    def create_event_action(self, org_id: int, form: CreateEventActionForm) -> EventActionDTO:
        """
        Create an action subscribed to form.registered_events.

        Raises:
            DuplicateNameError: an action with this name exists in the org
            NotFoundError: one of the registered events does not exist
        """
        ...

    @abstractmethod
    def delete_event_action(self, org_id: int, action_id: int) -> None:
        """
        Delete an action and its subscriptions.

        Raises:
            NotFoundError: no such action in the org
        """
        ...

    @abstractmethod
    def retrieve_event_action_by_name(self, org_id: int, name: str) -> EventActionDTO:
        """
        Raises:
            NotFoundError: no such action in the org
        """
        ...

    @abstractmethod
    def retrieve_event_actions_by_registered_event(
        self,
        org_id: int,
        event_name: str,
    ) -> list[EventActionDTO]:
        """Actions of the org subscribed to event_name (possibly empty)."""
        ...

    @abstractmethod
    def get_usage_metrics(self) -> dict[str, Any]:
        """Usage counters reported to the usage-metrics collaborator."""
        ...
