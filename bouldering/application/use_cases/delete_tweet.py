"""
Delete Tweet Use Case

Architectural Intent:
- Deletes a tweet and announces it with TweetDeletedEvent
- Storage prefixes are read before the delete, since media rows cascade
- The delete is the primary outcome: once it has committed, a failing
  cleanup handler is logged and reported but does not fail the request
"""

import logging

from bouldering.application.dtos.tweet_dtos import DeleteTweetRequest, DeleteTweetResponse
from bouldering.domain.events.tweet_events import TweetDeletedEvent
from bouldering.domain.ports.event_bus_port import EventBusPort
from bouldering.domain.ports.tweet_repository_port import TweetRepositoryPort

logger = logging.getLogger(__name__)


class DeleteTweet:
    def __init__(self, tweet_repository: TweetRepositoryPort, event_bus: EventBusPort):
        self.tweet_repository = tweet_repository
        self.event_bus = event_bus

    async def execute(self, tweet_id: int, user_id: str) -> DeleteTweetResponse:
        request = DeleteTweetRequest(tweet_id=tweet_id, user_id=user_id)

        prefixes = await self.tweet_repository.get_tweet_storage_prefixes(request.tweet_id)
        await self.tweet_repository.delete_tweet(request.tweet_id, request.user_id)
        logger.info(
            "Tweet %d deleted by %s (%d storage prefixes)",
            request.tweet_id,
            request.user_id,
            len(prefixes),
        )

        if not prefixes:
            logger.info("No GCS prefixes to delete for tweet %d", request.tweet_id)
            return DeleteTweetResponse(tweet_id=request.tweet_id)

        event = TweetDeletedEvent(
            tweet_id=request.tweet_id,
            user_id=request.user_id,
            storage_prefixes=tuple(prefixes),
        )
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.error(
                "Failed to publish %s for tweet %d: %s",
                event.event_type,
                request.tweet_id,
                e,
                extra={"prefixes": prefixes},
            )
            return DeleteTweetResponse(
                tweet_id=request.tweet_id, storage_prefixes=prefixes
            )

        logger.info("%s published: %s", event.event_type, event.summary())
        return DeleteTweetResponse(
            tweet_id=request.tweet_id,
            storage_prefixes=prefixes,
            cleanup_scheduled=True,
        )
