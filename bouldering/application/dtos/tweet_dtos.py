"""
Tweet DTOs

Architectural Intent:
- Data Transfer Objects for tweet use case boundaries
- Input validation at the application boundary
- Decouples external representation from domain model
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DeleteTweetRequest:
    tweet_id: int
    user_id: str

    def __post_init__(self) -> None:
        if self.tweet_id <= 0:
            raise ValueError("tweet_id must be positive")
        if not self.user_id:
            raise ValueError("user_id cannot be empty")


@dataclass(frozen=True)
class DeleteTweetResponse:
    tweet_id: int
    storage_prefixes: list[str] = field(default_factory=list)
    cleanup_scheduled: bool = False


@dataclass(frozen=True)
class RemoveTweetMediaRequest:
    tweet_id: int
    user_id: str
    media_url: str

    def __post_init__(self) -> None:
        if self.tweet_id <= 0:
            raise ValueError("tweet_id must be positive")
        if not self.user_id:
            raise ValueError("user_id cannot be empty")
        if not self.media_url:
            raise ValueError("media_url cannot be empty")


@dataclass(frozen=True)
class RemoveTweetMediaResponse:
    tweet_id: int
    media_url: str
    cleanup_scheduled: bool = False
