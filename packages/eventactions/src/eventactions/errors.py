"""
Event Actions Errors

Every failure raised by this package is an EventActionError. Only
ResolutionError ever escapes Dispatcher.publish(); the others are
contained per action and logged.
"""

from typing import Any


class EventActionError(Exception):
    """Base error for the event actions engine."""

    code = "EVENT_ACTION_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}


# Dispatch errors


class ResolutionError(EventActionError):
    """Subscribed actions could not be fetched from storage."""

    code = "RESOLUTION_ERROR"


class SerializationError(EventActionError):
    """Metadata or event payload could not be encoded as JSON."""

    code = "SERIALIZATION_ERROR"


class RequestConstructionError(EventActionError):
    """Outbound request could not be built (bad URL, multipart encoding)."""

    code = "REQUEST_CONSTRUCTION_ERROR"


class UnknownActionTypeError(EventActionError):
    """Action type matches none of the known variants."""

    code = "UNKNOWN_ACTION_TYPE"


class TransportError(EventActionError):
    """Action endpoint could not be reached (DNS, refused, timeout)."""

    code = "TRANSPORT_ERROR"


class ResponseReadError(EventActionError):
    """Response body could not be drained."""

    code = "RESPONSE_READ_ERROR"


# Registry errors


class NotFoundError(EventActionError):
    code = "NOT_FOUND"


class DuplicateNameError(EventActionError):
    code = "DUPLICATE_NAME"


class ValidationError(EventActionError):
    code = "VALIDATION_ERROR"
