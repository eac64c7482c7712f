"""
Event Bus Infrastructure

Architectural Intent:
- In-memory event bus implementation for publishing domain events
- Handlers are keyed by the event_type discriminator, in registration order
- publish() fans out to every handler concurrently and joins on all of them
- A single instance is built by the composition root and injected

Failure Semantics:
- Every handler runs to completion even when a sibling fails
- Each outcome is logged with the handler's registration index
- publish() re-raises the first failure (in completion order) after all
  handlers have settled; handlers are never retried
"""

import asyncio
import logging
import time
from typing import Optional

from bouldering.domain.events.event_base import DomainEvent
from bouldering.domain.ports.event_bus_port import AsyncEventHandler
from bouldering.infrastructure.telemetry.otel_exporter import OTELExporter

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self, telemetry: Optional[OTELExporter] = None) -> None:
        self._handlers: dict[str, list[AsyncEventHandler]] = {}
        self._telemetry = telemetry

    def subscribe(self, event_type: str, handler: AsyncEventHandler) -> None:
        if not event_type:
            raise ValueError("event_type must be a non-empty string")
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)
        logger.debug(
            "Event handler registered for %s (%d total)",
            event_type,
            len(handlers),
            extra={"event_type": event_type, "handler_count": len(handlers)},
        )

    async def publish(self, event: DomainEvent) -> None:
        event_type = event.event_type
        # Snapshot so a subscribe() during dispatch does not change this fan-out.
        handlers = list(self._handlers.get(event_type, ()))

        if not handlers:
            logger.debug(
                "No handlers registered for event type %s",
                event_type,
                extra={"event_type": event_type, "event": event.summary()},
            )
            return

        logger.info(
            "Publishing %s to %d handlers: %s",
            event_type,
            len(handlers),
            event.summary(),
            extra={"event_type": event_type, "handler_count": len(handlers)},
        )

        failures: list[Exception] = []

        async def run(index: int, handler: AsyncEventHandler) -> None:
            try:
                await handler(event)
            except Exception as exc:
                failures.append(exc)
                logger.error(
                    "Event handler %d failed for %s: %s",
                    index,
                    event_type,
                    exc,
                    exc_info=True,
                    extra={
                        "event_type": event_type,
                        "handler_index": index,
                        "error": str(exc),
                        "event": event.summary(),
                    },
                )
            else:
                logger.debug(
                    "Event handler %d completed for %s",
                    index,
                    event_type,
                    extra={"event_type": event_type, "handler_index": index},
                )

        span = None
        if self._telemetry:
            span = self._telemetry.start_span(
                "event_bus.publish",
                attributes={"event_type": event_type, "handler_count": str(len(handlers))},
            )
        started = time.monotonic()
        try:
            await asyncio.gather(*(run(i, h) for i, h in enumerate(handlers)))
        finally:
            if self._telemetry:
                self._telemetry.end_span(span)
                self._telemetry.record_publish(
                    event_type,
                    handler_count=len(handlers),
                    failed_count=len(failures),
                    duration_ms=(time.monotonic() - started) * 1000,
                )

        if failures:
            logger.error(
                "Event publication failed for %s: %d of %d handlers failed (%s)",
                event_type,
                len(failures),
                len(handlers),
                failures[0],
                extra={
                    "event_type": event_type,
                    "handler_count": len(handlers),
                    "failed_count": len(failures),
                    "error": str(failures[0]),
                },
            )
            raise failures[0]

        logger.info(
            "All %d event handlers completed for %s",
            len(handlers),
            event_type,
            extra={"event_type": event_type, "handler_count": len(handlers)},
        )

    def handler_info(self) -> dict[str, int]:
        """Debug view: registered handler count per event type."""
        return {event_type: len(h) for event_type, h in self._handlers.items()}
