"""
Request Builders

Pure functions building the outbound request for each action type:

- webhook: POST {url} with JSON {eventName, orgId, payload}
- code: POST {url}/execute, multipart upload of the script, the runner
  metadata and the raw event payload, authenticated with the runner secret

Nothing here performs I/O; the returned httpx.Request is sent by the
ActionExecutor.
"""

import json
from typing import Any, Callable

import httpx

from eventactions.contracts.envelope import PublishEnvelope
from eventactions.contracts.types import ActionType, EventActionDTO
from eventactions.errors import (
    RequestConstructionError,
    SerializationError,
    UnknownActionTypeError,
)

RUNNER_EXECUTE_PATH = "execute"
SCRIPT_PART = "file1"

BuildRequestFunc = Callable[[PublishEnvelope, EventActionDTO], httpx.Request]


def _dumps(value: Any, what: str) -> bytes:
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False).encode()
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot serialize {what}: {e}") from e


def _parse_url(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError) as e:
        raise RequestConstructionError(f"invalid action URL {raw!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise RequestConstructionError(f"invalid action URL {raw!r}: expected an absolute http(s) URL")
    return url


def runner_url(raw: str) -> httpx.URL:
    """Append the execute segment to the runner base URL, keeping its path and query."""
    url = _parse_url(raw)
    return url.copy_with(path=f"{url.path.rstrip('/')}/{RUNNER_EXECUTE_PATH}")


def build_webhook_request(envelope: PublishEnvelope, action: EventActionDTO) -> httpx.Request:
    """Build the JSON POST for a webhook action."""
    body = _dumps(envelope.to_dict(), "webhook payload")
    url = _parse_url(action.url)

    return httpx.Request(
        "POST",
        url,
        content=body,
        headers={"Content-Type": "application/json"},
    )


def build_runner_request(envelope: PublishEnvelope, action: EventActionDTO) -> httpx.Request:
    """
    Build the multipart POST for a code action.

    Parts:
        file1: script source, uploaded under the action's entrypoint file name
        metadata: {"name", "lang", "entrypoint"} as JSON
        event: raw event payload as JSON
    """
    metadata = _dumps(
        {
            "name": action.name,
            "lang": action.script_language,
            "entrypoint": action.entrypoint,
        },
        "runner metadata",
    )
    payload = _dumps(envelope.payload, "event payload")
    url = runner_url(action.url)

    files = [
        (SCRIPT_PART, (action.entrypoint, (action.script or "").encode(), "application/octet-stream")),
        ("metadata", (None, metadata, "application/json")),
        ("event", (None, payload, "application/json")),
    ]

    try:
        # httpx renders the multipart body and sets the boundary Content-Type
        return httpx.Request(
            "POST",
            url,
            files=files,
            headers={"Authorization": f"Bearer {action.runner_secret}"},
        )
    except (TypeError, ValueError) as e:
        raise RequestConstructionError(f"cannot encode runner request: {e}") from e


REQUEST_BUILDERS: dict[ActionType, BuildRequestFunc] = {
    ActionType.CODE: build_runner_request,
    ActionType.WEBHOOK: build_webhook_request,
}


def get_request_builder(action_type: str) -> BuildRequestFunc:
    """
    Resolve the builder for an action type.

    Raises:
        UnknownActionTypeError: type is none of the known variants
    """
    try:
        return REQUEST_BUILDERS[ActionType(action_type)]
    except (ValueError, KeyError):
        raise UnknownActionTypeError(
            f"unknown action type: {action_type!r}",
            details={"type": str(action_type)},
        ) from None


def build_request(envelope: PublishEnvelope, action: EventActionDTO) -> httpx.Request:
    """Build the outbound request for any action."""
    return get_request_builder(action.type)(envelope, action)
