"""
Event Bus Port

Architectural Intent:
- Abstract interface for publishing domain events
- Allows decoupling of event producers from consumers
- Implementation can be in-memory or backed by a durable outbox
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable
from bouldering.domain.events.event_base import DomainEvent

AsyncEventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_type: str, handler: AsyncEventHandler) -> None: ...
