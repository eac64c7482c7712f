"""
Tweet Entity

Architectural Intent:
- A tweet is a user's activity post about a gym session
- Media items are owned by the tweet and removed with it
- Plain immutable data; persistence lives behind TweetRepositoryPort
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class TweetMedia:
    media_url: str
    media_type: str
    display_order: int = 0
    storage_prefix: Optional[str] = None


@dataclass(frozen=True)
class Tweet:
    tweet_id: int
    user_id: str
    gym_id: int
    contents: str
    created_at: datetime
    visited_date: Optional[date] = None
    media: tuple[TweetMedia, ...] = ()

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    @property
    def media_urls(self) -> list[str]:
        return [m.media_url for m in self.media]
