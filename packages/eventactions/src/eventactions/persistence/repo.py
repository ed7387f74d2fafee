"""
Event Actions Repository

SQLAlchemy implementation of the storage collaborator. Each write
commits its own transaction.
"""

import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventactions.contracts.forms import CreateEventActionForm, RegisterEventForm
from eventactions.contracts.types import ActionType, EventActionDTO, EventDTO
from eventactions.errors import DuplicateNameError, NotFoundError
from eventactions.persistence.models import (
    EventActionModel,
    EventActionRegistration,
    EventModel,
)
from eventactions.persistence.store import EventActionsStore, EventStore

logger = logging.getLogger(__name__)


class SQLEventActionsStore(EventStore, EventActionsStore):
    """Event and action storage backed by a SQLAlchemy session."""

    def __init__(self, db: Session, encryption_key: str | None = None):
        self.db = db
        self._fernet = Fernet(encryption_key.encode()) if encryption_key else None

    # =========================================================================
    # Secrets
    # =========================================================================

    def _encrypt(self, secret: str | None) -> str | None:
        if not secret or self._fernet is None:
            return secret
        return self._fernet.encrypt(secret.encode()).decode()

    def _decrypt(self, stored: str | None) -> str:
        if not stored or self._fernet is None:
            return stored or ""
        try:
            return self._fernet.decrypt(stored.encode()).decode()
        except InvalidToken:
            # Written before a key was configured
            logger.warning("Runner secret is not encrypted with the configured key")
            return stored

    def _to_dto(self, action: EventActionModel) -> EventActionDTO:
        return EventActionDTO(
            id=action.id,
            org_id=action.org_id,
            name=action.name,
            type=action.type,
            url=action.url,
            script=action.script or "",
            script_language=action.script_language or "",
            runner_secret=self._decrypt(action.runner_secret),
            entrypoint=action.entrypoint,
            registered_events=[r.event_name for r in action.registrations],
        )

    # =========================================================================
    # Events
    # =========================================================================

    def get_event(self, name: str) -> EventModel | None:
        """Get event by name."""
        return self.db.query(EventModel).filter(EventModel.name == name).first()

    def create_event(self, form: RegisterEventForm) -> EventDTO:
        if self.get_event(form.name):
            raise DuplicateNameError(f"event already exists: {form.name}", details={"name": form.name})

        event = EventModel(name=form.name, org_id=form.org_id)
        self.db.add(event)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateNameError(f"event already exists: {form.name}", details={"name": form.name}) from e

        return EventDTO(id=event.id, name=event.name, org_id=event.org_id, created_at=event.created_at)

    def list_events(self, org_id: int) -> list[EventDTO]:
        events = (
            self.db.query(EventModel)
            .filter(EventModel.org_id == org_id)
            .order_by(EventModel.name)
            .all()
        )
        return [
            EventDTO(id=e.id, name=e.name, org_id=e.org_id, created_at=e.created_at)
            for e in events
        ]

    def delete_event(self, event_name: str) -> None:
        event = self.get_event(event_name)
        if not event:
            raise NotFoundError(f"event not found: {event_name}", details={"name": event_name})

        self.db.query(EventActionRegistration).filter(
            EventActionRegistration.event_name == event_name
        ).delete(synchronize_session=False)
        self.db.delete(event)
        self.db.commit()

    # =========================================================================
    # Actions
    # =========================================================================

    def _get_action(self, org_id: int, **filters: Any) -> EventActionModel | None:
        return (
            self.db.query(EventActionModel)
            .filter_by(org_id=org_id, **filters)
            .first()
        )

    def create_event_action(self, org_id: int, form: CreateEventActionForm) -> EventActionDTO:
        if self._get_action(org_id, name=form.name):
            raise DuplicateNameError(
                f"event action already exists: {form.name}",
                details={"name": form.name, "org_id": org_id},
            )

        event_names = list(dict.fromkeys(form.registered_events))
        for event_name in event_names:
            if not self.get_event(event_name):
                raise NotFoundError(f"event not found: {event_name}", details={"name": event_name})

        action = EventActionModel(
            org_id=org_id,
            name=form.name,
            type=form.type.value,
            url=form.url,
            script=form.script,
            script_language=form.script_language,
            runner_secret=self._encrypt(form.runner_secret),
            entrypoint=form.entrypoint,
            registrations=[
                EventActionRegistration(org_id=org_id, event_name=name)
                for name in event_names
            ],
        )
        self.db.add(action)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateNameError(
                f"event action already exists: {form.name}",
                details={"name": form.name, "org_id": org_id},
            ) from e

        return self._to_dto(action)

    def delete_event_action(self, org_id: int, action_id: int) -> None:
        action = self._get_action(org_id, id=action_id)
        if not action:
            raise NotFoundError(
                f"event action not found: {action_id}",
                details={"id": action_id, "org_id": org_id},
            )
        self.db.delete(action)
        self.db.commit()

    def retrieve_event_action_by_name(self, org_id: int, name: str) -> EventActionDTO:
        action = self._get_action(org_id, name=name)
        if not action:
            raise NotFoundError(
                f"event action not found: {name}",
                details={"name": name, "org_id": org_id},
            )
        return self._to_dto(action)

    def retrieve_event_actions_by_registered_event(
        self,
        org_id: int,
        event_name: str,
    ) -> list[EventActionDTO]:
        actions = (
            self.db.query(EventActionModel)
            .join(EventActionRegistration)
            .filter(
                EventActionModel.org_id == org_id,
                EventActionRegistration.event_name == event_name,
            )
            .order_by(EventActionModel.id)
            .all()
        )
        return [self._to_dto(a) for a in actions]

    # =========================================================================
    # Usage metrics
    # =========================================================================

    def get_usage_metrics(self) -> dict[str, Any]:
        by_type = dict(
            self.db.query(EventActionModel.type, func.count(EventActionModel.id))
            .group_by(EventActionModel.type)
            .all()
        )

        metrics: dict[str, Any] = {
            "stats.events.count": self.db.query(func.count(EventModel.id)).scalar() or 0,
            "stats.eventactions.count": sum(by_type.values()),
        }
        for action_type in ActionType:
            metrics[f"stats.eventactions.{action_type.value}.count"] = by_type.get(action_type.value, 0)
        return metrics
