"""
Tweet Repository Port

Architectural Intent:
- Data-access contract for tweets and their media
- Ownership checks live in the repository so check-and-delete is atomic
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from bouldering.domain.entities.tweet import Tweet


class TweetRepositoryPort(ABC):
    @abstractmethod
    async def create_tweet(
        self,
        user_id: str,
        gym_id: int,
        contents: str,
        visited_date: Optional[date] = None,
        media_urls: Optional[list[str]] = None,
    ) -> Tweet:
        pass

    @abstractmethod
    async def get_tweet_by_id(self, tweet_id: int) -> Optional[Tweet]:
        pass

    @abstractmethod
    async def get_user_tweets(self, user_id: str, limit: int = 20) -> list[Tweet]:
        pass

    @abstractmethod
    async def delete_tweet(self, tweet_id: int, user_id: str) -> None:
        """
        Deletes a tweet owned by user_id.
        Raises TweetNotFoundError or TweetPermissionError.
        """
        pass

    @abstractmethod
    async def get_tweet_storage_prefixes(self, tweet_id: int) -> list[str]:
        """
        Returns the unique storage prefixes of a tweet's media.
        """
        pass

    @abstractmethod
    async def add_tweet_media(
        self, tweet_id: int, user_id: str, media_url: str, media_type: str
    ) -> None:
        pass

    @abstractmethod
    async def delete_tweet_media(
        self, tweet_id: int, user_id: str, media_url: str
    ) -> None:
        """
        Raises TweetMediaNotFoundError when the URL is not attached.
        """
        pass
