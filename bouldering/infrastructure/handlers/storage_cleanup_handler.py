"""
Storage Cleanup Event Handler

Architectural Intent:
- Subscribes to tweet deletion events and schedules removal of their media
- Bridges domain events to the task queue without the domain knowing
  about Cloud Tasks or Cloud Storage
- Failures are logged and re-raised so the event bus reports them
"""

import logging
from typing import Optional

from bouldering.domain.events.tweet_events import (
    TweetDeletedEvent,
    TweetMediaDeletedEvent,
)
from bouldering.domain.ports.task_queue_port import TaskQueuePort
from bouldering.infrastructure.telemetry.otel_exporter import OTELExporter

logger = logging.getLogger(__name__)


class StorageCleanupEventHandler:
    def __init__(
        self,
        task_queue: TaskQueuePort,
        telemetry: Optional[OTELExporter] = None,
    ) -> None:
        self.task_queue = task_queue
        self._telemetry = telemetry

    async def handle_tweet_deleted(self, event: TweetDeletedEvent) -> None:
        logger.info(
            "Processing %s for storage cleanup: %s",
            event.event_type,
            event.summary(),
            extra={"tweet_id": event.tweet_id, "user_id": event.user_id},
        )
        if not event.has_storage_prefixes():
            logger.info("No storage prefixes to clean up for tweet %d", event.tweet_id)
            return
        await self._enqueue(list(event.storage_prefixes), event.summary())

    async def handle_media_deleted(self, event: TweetMediaDeletedEvent) -> None:
        if not event.storage_prefix:
            logger.info(
                "Media %s has no storage prefix, nothing to clean up", event.media_url
            )
            return
        await self._enqueue([event.storage_prefix], event.summary())

    async def _enqueue(self, prefixes: list[str], summary: str) -> None:
        try:
            await self.task_queue.enqueue_delete_prefixes(prefixes)
        except Exception as e:
            logger.error(
                "Failed to schedule storage cleanup (%s): %s",
                summary,
                e,
                extra={"prefix_count": len(prefixes)},
            )
            raise
        if self._telemetry:
            self._telemetry.record_cleanup_enqueued(len(prefixes))
        logger.info("Storage cleanup scheduled for %d prefixes (%s)", len(prefixes), summary)
