"""
Event Actions Delivery

Turns an action plus an event into an outbound HTTP request and executes it.
"""

from eventactions.delivery.builders import (
    REQUEST_BUILDERS,
    build_runner_request,
    build_webhook_request,
    get_request_builder,
)
from eventactions.delivery.executor import ActionExecutor

__all__ = [
    "ActionExecutor",
    "REQUEST_BUILDERS",
    "build_runner_request",
    "build_webhook_request",
    "get_request_builder",
]
