"""
Pytest fixtures for event actions tests.
"""

import inspect
from email.parser import BytesParser
from email.policy import default as default_policy

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventactions.contracts.types import ActionType, EventActionDTO
from eventactions.persistence.models import EventActionsBase
from eventactions.persistence.repo import SQLEventActionsStore
from eventactions.service.registry import ActionRegistry, EventRegistry


class RecordingHandler:
    """MockTransport handler that records every request it receives."""

    def __init__(self, respond=None):
        self.requests: list[httpx.Request] = []
        self.respond = respond or (lambda request: httpx.Response(200, text="ok"))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.respond(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


def parse_multipart(request: httpx.Request) -> dict[str, dict]:
    """Split a multipart request into {name: {filename, content_type, body}}."""
    body = request.read()
    raw = b"Content-Type: " + request.headers["Content-Type"].encode() + b"\r\n\r\n" + body
    message = BytesParser(policy=default_policy).parsebytes(raw)

    parts = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        parts[name] = {
            "filename": part.get_filename(),
            "content_type": part.get_content_type(),
            "body": part.get_payload(decode=True),
        }
    return parts


@pytest.fixture
def recording_handler():
    """Factory for recording MockTransport handlers."""
    return RecordingHandler


@pytest.fixture
def mock_client():
    """Factory for AsyncClients backed by a handler."""
    clients = []

    def _make(handler) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    return _make


@pytest.fixture
def make_action():
    """Factory for action definitions."""
    counter = iter(range(1, 10_000))

    def _make(name: str = "hook", type: str = ActionType.WEBHOOK.value, **overrides) -> EventActionDTO:
        fields = {
            "id": next(counter),
            "org_id": 1,
            "name": name,
            "type": type,
            "url": f"http://hooks.example.com/{name}",
        }
        if type == ActionType.CODE.value:
            fields.update(
                url="http://runner.example.com",
                script="print(1)",
                script_language="python",
                runner_secret="s3cret",
            )
        fields.update(overrides)
        return EventActionDTO(**fields)

    return _make


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with the event actions tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    EventActionsBase.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(db_sessionmaker):
    session = db_sessionmaker()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return SQLEventActionsStore(db_session)


@pytest.fixture
def event_registry(store):
    return EventRegistry(store)


@pytest.fixture
def action_registry(store):
    return ActionRegistry(store)
