"""
Remove Tweet Media Use Case

Architectural Intent:
- Detaches one media item from a tweet and announces TweetMediaDeletedEvent
- Same failure policy as DeleteTweet: the row removal stands even if
  cleanup scheduling fails
"""

import logging

from bouldering.application.dtos.tweet_dtos import (
    RemoveTweetMediaRequest,
    RemoveTweetMediaResponse,
)
from bouldering.domain.events.tweet_events import TweetMediaDeletedEvent
from bouldering.domain.ports.event_bus_port import EventBusPort
from bouldering.domain.ports.tweet_repository_port import TweetRepositoryPort
from bouldering.domain.services.storage_path import derive_storage_prefix

logger = logging.getLogger(__name__)


class RemoveTweetMedia:
    def __init__(self, tweet_repository: TweetRepositoryPort, event_bus: EventBusPort):
        self.tweet_repository = tweet_repository
        self.event_bus = event_bus

    async def execute(
        self, tweet_id: int, user_id: str, media_url: str
    ) -> RemoveTweetMediaResponse:
        request = RemoveTweetMediaRequest(
            tweet_id=tweet_id, user_id=user_id, media_url=media_url
        )
        await self.tweet_repository.delete_tweet_media(
            request.tweet_id, request.user_id, request.media_url
        )

        prefix = derive_storage_prefix(request.media_url)
        if prefix is None:
            logger.warning(
                "Could not derive prefix from %s, skipping deletion", request.media_url
            )
            return RemoveTweetMediaResponse(request.tweet_id, request.media_url)

        event = TweetMediaDeletedEvent(
            tweet_id=request.tweet_id,
            user_id=request.user_id,
            media_url=request.media_url,
            storage_prefix=prefix,
        )
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.error("Failed to publish %s: %s", event.event_type, e)
            return RemoveTweetMediaResponse(request.tweet_id, request.media_url)

        return RemoveTweetMediaResponse(
            request.tweet_id, request.media_url, cleanup_scheduled=True
        )
