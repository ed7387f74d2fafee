"""
Event Actions Database Models

Tables:
- eventactions_events: registered event names
- eventactions_actions: action definitions (webhook or code runner)
- eventactions_registrations: which action is subscribed to which event
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from eventactions.contracts.types import DEFAULT_ENTRYPOINT

EventActionsBase = declarative_base()


class EventModel(EventActionsBase):
    """A registered event name. Names are unique and case-sensitive."""

    __tablename__ = "eventactions_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, nullable=False, index=True)
    name = Column(String(190), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("name", name="uq_eventactions_events_name"),
    )


class EventActionModel(EventActionsBase):
    """
    An action definition.

    script, script_language and runner_secret are only meaningful for
    code actions. runner_secret is Fernet-encrypted when a key is configured.
    """

    __tablename__ = "eventactions_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, nullable=False, index=True)
    name = Column(String(190), nullable=False)
    type = Column(String(20), nullable=False)  # code, webhook
    url = Column(String(2048), nullable=False)
    script = Column(Text, nullable=True)
    script_language = Column(String(50), nullable=True)
    runner_secret = Column(Text, nullable=True)
    entrypoint = Column(String(190), nullable=False, default=DEFAULT_ENTRYPOINT)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    registrations = relationship(
        "EventActionRegistration",
        back_populates="action",
        cascade="all, delete-orphan",
        order_by="EventActionRegistration.event_name",
    )

    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_eventactions_actions_org_name"),
        Index("idx_eventactions_actions_org_type", "org_id", "type"),
    )


class EventActionRegistration(EventActionsBase):
    """Subscription of an action to an event name."""

    __tablename__ = "eventactions_registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    org_id = Column(Integer, nullable=False)
    action_id = Column(
        Integer,
        ForeignKey("eventactions_actions.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_name = Column(String(190), nullable=False)

    action = relationship("EventActionModel", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("action_id", "event_name", name="uq_eventactions_registrations_action_event"),
        Index("idx_eventactions_registrations_org_event", "org_id", "event_name"),
    )
