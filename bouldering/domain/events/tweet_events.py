"""
Tweet Domain Events

Architectural Intent:
- Events raised after a tweet (activity post) or its media leaves the database
- Carry the storage prefixes needed to clean up Cloud Storage objects
- Pure domain data: no knowledge of Cloud Tasks or GCS
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from bouldering.domain.events.event_base import DomainEvent


@dataclass(frozen=True, kw_only=True)
class TweetDeletedEvent(DomainEvent):
    event_type: ClassVar[str] = "TweetDeleted"

    tweet_id: int
    user_id: str
    storage_prefixes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Callers routinely hand over lists straight from the repository.
        object.__setattr__(self, "storage_prefixes", tuple(self.storage_prefixes))

    def has_storage_prefixes(self) -> bool:
        return len(self.storage_prefixes) > 0

    def summary(self) -> str:
        return (
            f"Tweet {self.tweet_id} deleted by user {self.user_id} "
            f"with {len(self.storage_prefixes)} storage prefixes"
        )

    def payload(self) -> dict[str, Any]:
        return {
            "tweet_id": self.tweet_id,
            "user_id": self.user_id,
            "storage_prefixes": list(self.storage_prefixes),
        }


@dataclass(frozen=True, kw_only=True)
class TweetMediaDeletedEvent(DomainEvent):
    event_type: ClassVar[str] = "TweetMediaDeleted"

    tweet_id: int
    user_id: str
    media_url: str
    storage_prefix: Optional[str] = None

    def summary(self) -> str:
        return (
            f"Media {self.media_url} removed from tweet {self.tweet_id} "
            f"by user {self.user_id}"
        )

    def payload(self) -> dict[str, Any]:
        return {
            "tweet_id": self.tweet_id,
            "user_id": self.user_id,
            "media_url": self.media_url,
            "storage_prefix": self.storage_prefix,
        }
