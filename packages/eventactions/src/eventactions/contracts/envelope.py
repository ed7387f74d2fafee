"""
Publish Envelope

The event as seen by every action of one publish. Built once and shared
read-only across the dispatcher workers.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PublishEnvelope:
    """
    Attributes:
        event_name: Name of the published event
        org_id: Organization the event was published in
        payload: Arbitrary JSON-compatible event data
    """

    event_name: str
    org_id: int
    payload: Any

    def to_dict(self) -> dict[str, Any]:
        """Webhook wire representation."""
        return {
            "eventName": self.event_name,
            "orgId": self.org_id,
            "payload": self.payload,
        }
