"""
Domain Events Package

Architectural Intent:
- Contains the closed set of domain events keyed by event_type
- Events are the primary mechanism for cross-boundary communication
- event_from_dict rebuilds a variant from its to_dict() form (outbox replay)
"""

from datetime import datetime
from typing import Any, Mapping

from bouldering.domain.errors import UnknownEventTypeError
from bouldering.domain.events.event_base import DomainEvent
from bouldering.domain.events.tweet_events import (
    TweetDeletedEvent,
    TweetMediaDeletedEvent,
)

EVENT_TYPES: Mapping[str, type[DomainEvent]] = {
    TweetDeletedEvent.event_type: TweetDeletedEvent,
    TweetMediaDeletedEvent.event_type: TweetMediaDeletedEvent,
}


def event_from_dict(data: Mapping[str, Any]) -> DomainEvent:
    """Rebuild an event from the output of DomainEvent.to_dict()."""
    event_type = data.get("event_type", "")
    cls = EVENT_TYPES.get(event_type)
    if cls is None:
        raise UnknownEventTypeError(f"Unknown event type: {event_type!r}")

    fields = {k: v for k, v in data.items() if k not in ("event_type", "occurred_at")}
    event = cls(**fields)
    occurred_at = data.get("occurred_at")
    if occurred_at:
        object.__setattr__(event, "occurred_at", datetime.fromisoformat(occurred_at))
    return event


__all__ = [
    "DomainEvent",
    "TweetDeletedEvent",
    "TweetMediaDeletedEvent",
    "EVENT_TYPES",
    "event_from_dict",
]
