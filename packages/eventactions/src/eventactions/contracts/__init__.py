"""
Event Actions Contracts

Action and event definitions, input forms and the transient dispatch types.
"""

from eventactions.contracts.envelope import PublishEnvelope
from eventactions.contracts.forms import CreateEventActionForm, RegisterEventForm
from eventactions.contracts.types import (
    DEFAULT_ENTRYPOINT,
    ActionOutcome,
    ActionState,
    ActionType,
    EventActionDTO,
    EventDTO,
    PublishSummary,
    RunResult,
)

__all__ = [
    "DEFAULT_ENTRYPOINT",
    "ActionOutcome",
    "ActionState",
    "ActionType",
    "CreateEventActionForm",
    "EventActionDTO",
    "EventDTO",
    "PublishEnvelope",
    "PublishSummary",
    "RegisterEventForm",
    "RunResult",
]
