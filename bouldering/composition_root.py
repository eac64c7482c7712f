"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the bouldering backend
- Single place where all adapters and use cases are wired together
- Exactly one EventBus per container; handlers are subscribed here,
  before any request can publish

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Factory function creates and wires all dependencies
- Google clients are created lazily by their adapters, so building the
  container needs no credentials
"""

import logging
from dataclasses import dataclass
from typing import Optional

from bouldering.application.use_cases.delete_tweet import DeleteTweet
from bouldering.application.use_cases.purge_storage_prefix import PurgeStoragePrefix
from bouldering.application.use_cases.remove_tweet_media import RemoveTweetMedia
from bouldering.domain.events.tweet_events import (
    TweetDeletedEvent,
    TweetMediaDeletedEvent,
)
from bouldering.domain.ports.event_bus_port import EventBusPort
from bouldering.domain.ports.storage_port import StoragePort
from bouldering.domain.ports.task_queue_port import TaskQueuePort
from bouldering.domain.ports.token_verifier_port import TokenVerifierPort
from bouldering.infrastructure.adapters.cloud_tasks_adapter import create_task_queue
from bouldering.infrastructure.adapters.gcs_storage_adapter import GCSStorageAdapter
from bouldering.infrastructure.auth.firebase_verifier import FirebaseTokenVerifier
from bouldering.infrastructure.config import BoulderingConfig
from bouldering.infrastructure.event_bus import EventBus
from bouldering.infrastructure.handlers.storage_cleanup_handler import (
    StorageCleanupEventHandler,
)
from bouldering.infrastructure.outbox import (
    OutboxEventPublisher,
    OutboxRelay,
    SQLiteOutbox,
)
from bouldering.infrastructure.repositories.sqlite_tweet_repository import (
    SQLiteTweetRepository,
)
from bouldering.infrastructure.telemetry.otel_exporter import OTELConfig, OTELExporter

logger = logging.getLogger(__name__)


@dataclass
class BoulderingContainer:
    """DI container holding all wired dependencies."""

    config: BoulderingConfig
    event_bus: EventBus
    publisher: EventBusPort
    telemetry: OTELExporter
    tweet_repository: SQLiteTweetRepository
    task_queue: TaskQueuePort
    storage: StoragePort
    token_verifier: TokenVerifierPort
    storage_cleanup_handler: StorageCleanupEventHandler
    delete_tweet: DeleteTweet
    remove_tweet_media: RemoveTweetMedia
    purge_storage_prefix: PurgeStoragePrefix
    outbox: Optional[SQLiteOutbox] = None
    outbox_relay: Optional[OutboxRelay] = None

    def close(self) -> None:
        self.tweet_repository.close()
        if self.outbox:
            self.outbox.close()


def register_event_handlers(
    event_bus: EventBusPort, handler: StorageCleanupEventHandler
) -> None:
    """Subscribe side-effect handlers. Call once at bootstrap."""
    event_bus.subscribe(TweetDeletedEvent.event_type, handler.handle_tweet_deleted)
    event_bus.subscribe(TweetMediaDeletedEvent.event_type, handler.handle_media_deleted)


def create_container(
    config: Optional[BoulderingConfig] = None,
    task_queue: Optional[TaskQueuePort] = None,
    storage: Optional[StoragePort] = None,
    token_verifier: Optional[TokenVerifierPort] = None,
) -> BoulderingContainer:
    """Create and wire all dependencies."""
    config = config or BoulderingConfig()

    telemetry = OTELExporter(
        OTELConfig(endpoint=config.telemetry.endpoint, insecure=config.telemetry.insecure)
    )
    event_bus = EventBus(telemetry=telemetry)

    tweet_repository = SQLiteTweetRepository(config.database.path)
    tweet_repository.connect()

    task_queue = task_queue or create_task_queue(config.tasks)
    storage = storage or GCSStorageAdapter(config.storage.bucket_name)
    token_verifier = token_verifier or FirebaseTokenVerifier(config.firebase)

    storage_cleanup_handler = StorageCleanupEventHandler(task_queue, telemetry=telemetry)
    register_event_handlers(event_bus, storage_cleanup_handler)

    publisher: EventBusPort = event_bus
    outbox = None
    outbox_relay = None
    if config.events.use_outbox:
        outbox = SQLiteOutbox(config.events.outbox_path)
        outbox.connect()
        publisher = OutboxEventPublisher(outbox, event_bus)
        outbox_relay = OutboxRelay(
            outbox, event_bus, max_attempts=config.events.relay_max_attempts
        )

    logger.info(
        "Event system ready (%s): %s",
        type(publisher).__name__,
        event_bus.handler_info(),
    )

    return BoulderingContainer(
        config=config,
        event_bus=event_bus,
        publisher=publisher,
        telemetry=telemetry,
        tweet_repository=tweet_repository,
        task_queue=task_queue,
        storage=storage,
        token_verifier=token_verifier,
        storage_cleanup_handler=storage_cleanup_handler,
        delete_tweet=DeleteTweet(tweet_repository, publisher),
        remove_tweet_media=RemoveTweetMedia(tweet_repository, publisher),
        purge_storage_prefix=PurgeStoragePrefix(storage),
        outbox=outbox,
        outbox_relay=outbox_relay,
    )
