"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from bouldering.domain.ports.event_bus_port import AsyncEventHandler, EventBusPort
from bouldering.domain.ports.tweet_repository_port import TweetRepositoryPort
from bouldering.domain.ports.task_queue_port import TaskQueuePort
from bouldering.domain.ports.storage_port import PurgeResult, StoragePort
from bouldering.domain.ports.token_verifier_port import (
    AuthenticatedUser,
    TokenVerifierPort,
)

__all__ = [
    "AsyncEventHandler",
    "EventBusPort",
    "TweetRepositoryPort",
    "TaskQueuePort",
    "PurgeResult",
    "StoragePort",
    "AuthenticatedUser",
    "TokenVerifierPort",
]
