"""
Event and Action Registries

Thin facades over the storage collaborator. They validate input and
translate storage errors; everything else is delegated.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from eventactions.contracts.forms import CreateEventActionForm, RegisterEventForm
from eventactions.contracts.types import EventActionDTO, EventDTO
from eventactions.errors import NotFoundError, ValidationError
from eventactions.persistence.store import EventActionsStore, EventStore

logger = logging.getLogger(__name__)


def _validation_error(e: PydanticValidationError) -> ValidationError:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in e.errors()
    ]
    summary = "; ".join(f"{err['field'] or 'form'}: {err['message']}" for err in errors)
    return ValidationError(f"invalid form: {summary}", details={"errors": errors})


class EventRegistry:
    """Registers, lists and unregisters event names."""

    def __init__(self, store: EventStore):
        self.store = store

    def register_event(self, name: str, org_id: int) -> EventDTO:
        """
        Raises:
            ValidationError: name is empty
            DuplicateNameError: event already registered
        """
        try:
            form = RegisterEventForm(name=name, org_id=org_id)
        except PydanticValidationError as e:
            raise _validation_error(e) from e

        try:
            event = self.store.create_event(form)
        except Exception as e:
            logger.error("Failed creating event", extra={"event": name, "error": str(e)})
            raise

        logger.info("Event registered", extra={"event": name, "org_id": org_id})
        return event

    def list_events(self, org_id: int) -> list[EventDTO]:
        return self.store.list_events(org_id)

    def unregister_event(self, name: str) -> None:
        """
        Raises:
            NotFoundError: no such event
        """
        self.store.delete_event(name)
        logger.info("Event unregistered", extra={"event": name})


class ActionRegistry:
    """Creates, deletes and looks up event actions."""

    def __init__(self, store: EventActionsStore):
        self.store = store

    def create_action(
        self,
        org_id: int,
        form: CreateEventActionForm | dict[str, Any],
    ) -> EventActionDTO:
        """
        Raises:
            ValidationError: invalid form or unknown registered event
            DuplicateNameError: action name taken in the org
        """
        if not isinstance(form, CreateEventActionForm):
            try:
                form = CreateEventActionForm.model_validate(form)
            except PydanticValidationError as e:
                raise _validation_error(e) from e

        try:
            action = self.store.create_event_action(org_id, form)
        except NotFoundError as e:
            raise ValidationError(
                f"cannot subscribe to unregistered event: {e.details.get('name', e.message)}",
                details=e.details,
            ) from e

        logger.info(
            "Event action created",
            extra={"action": action.name, "type": action.type, "org_id": org_id},
        )
        return action

    def delete_action(self, org_id: int, action_id: int) -> None:
        """
        Raises:
            NotFoundError: no such action
        """
        self.store.delete_event_action(org_id, action_id)
        logger.info("Event action deleted", extra={"action_id": action_id, "org_id": org_id})

    def get_action_by_name(self, org_id: int, name: str) -> EventActionDTO:
        """
        Raises:
            NotFoundError: no such action
        """
        return self.store.retrieve_event_action_by_name(org_id, name)

    def get_actions_by_event(self, org_id: int, event_name: str) -> list[EventActionDTO]:
        return self.store.retrieve_event_actions_by_registered_event(org_id, event_name)
