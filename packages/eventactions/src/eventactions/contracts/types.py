"""
Event Actions Types

Provider-agnostic representations of events, actions and dispatch outcomes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from eventactions.errors import EventActionError

# Name of the uploaded script file the runner executes
DEFAULT_ENTRYPOINT = "file1"


class ActionType(str, Enum):
    """Kinds of event actions."""

    CODE = "code"
    WEBHOOK = "webhook"

    def __str__(self) -> str:
        return self.value


class ActionState(str, Enum):
    """
    Lifecycle of one action within a publish.

    QUEUED -> BUILDING -> EXECUTING -> SUCCEEDED | FAILED
    """

    QUEUED = "queued"
    BUILDING = "building"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class EventDTO:
    """A registered event name."""

    id: int
    name: str
    org_id: int
    created_at: datetime


@dataclass
class EventActionDTO:
    """
    An action subscribed to zero or more events.

    Code actions carry script, script_language and runner_secret; webhook
    actions only need url.
    """

    id: int
    org_id: int
    name: str
    type: str
    url: str
    script: str = ""
    script_language: str = ""
    runner_secret: str = ""
    entrypoint: str = DEFAULT_ENTRYPOINT
    registered_events: list[str] = field(default_factory=list)


@dataclass
class RunResult:
    """Normalized outcome of executing one action."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class ActionOutcome:
    """Final state of one action in a publish."""

    action_name: str
    state: ActionState
    result: RunResult | None = None
    error: EventActionError | None = None


@dataclass
class PublishSummary:
    """Aggregate of a completed publish."""

    event_name: str
    org_id: int
    actions: int
    workers: int
    duration: float  # seconds
    outcomes: list[ActionOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.state == ActionState.SUCCEEDED)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.state == ActionState.FAILED)
