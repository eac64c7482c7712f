"""
Domain Events Module

Architectural Intent:
- Base class for domain events following DDD principles
- Events are immutable and capture significant domain occurrences
- Every event names its type through a class-level discriminator
- summary() is the single contract used for log output
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, ClassVar


@dataclass(frozen=True)
class DomainEvent:
    event_type: ClassVar[str] = "DomainEvent"

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(UTC), init=False, compare=False
    )

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("event_type"):
            raise TypeError(f"{cls.__name__} must declare a non-empty event_type")

    def summary(self) -> str:
        return f"{self.event_type} at {self.occurred_at.isoformat()}"

    def payload(self) -> dict[str, Any]:
        """Event-specific fields, overridden by each variant."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            **self.payload(),
        }
