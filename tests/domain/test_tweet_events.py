"""Tests for tweet domain events and the event registry."""

from dataclasses import FrozenInstanceError, dataclass
from datetime import datetime
from typing import ClassVar

import pytest

from bouldering.domain.errors import UnknownEventTypeError
from bouldering.domain.events import EVENT_TYPES, event_from_dict
from bouldering.domain.events.event_base import DomainEvent
from bouldering.domain.events.tweet_events import (
    TweetDeletedEvent,
    TweetMediaDeletedEvent,
)


class TestTweetDeletedEvent:
    def test_event_type(self):
        event = TweetDeletedEvent(tweet_id=1, user_id="u1")
        assert event.event_type == "TweetDeleted"

    def test_occurred_at_is_set(self):
        event = TweetDeletedEvent(tweet_id=1, user_id="u1")
        assert isinstance(event.occurred_at, datetime)
        assert event.occurred_at.tzinfo is not None

    def test_immutable(self):
        event = TweetDeletedEvent(tweet_id=1, user_id="u1")
        with pytest.raises(FrozenInstanceError):
            event.tweet_id = 2

    def test_prefix_list_becomes_tuple(self):
        event = TweetDeletedEvent(
            tweet_id=1, user_id="u1", storage_prefixes=["v1/public/a", "v1/public/b"]
        )
        assert event.storage_prefixes == ("v1/public/a", "v1/public/b")
        assert event.has_storage_prefixes()

    def test_no_prefixes(self):
        event = TweetDeletedEvent(tweet_id=1, user_id="u1")
        assert not event.has_storage_prefixes()

    def test_summary(self):
        event = TweetDeletedEvent(
            tweet_id=42, user_id="u1", storage_prefixes=("a", "b")
        )
        assert event.summary() == "Tweet 42 deleted by user u1 with 2 storage prefixes"

    def test_to_dict(self):
        event = TweetDeletedEvent(tweet_id=42, user_id="u1", storage_prefixes=("a",))
        data = event.to_dict()
        assert data["event_type"] == "TweetDeleted"
        assert data["tweet_id"] == 42
        assert data["user_id"] == "u1"
        assert data["storage_prefixes"] == ["a"]
        assert data["occurred_at"] == event.occurred_at.isoformat()


class TestEventPayloadRequired:
    def test_tweet_deleted_needs_ids(self):
        with pytest.raises(TypeError):
            TweetDeletedEvent()
        with pytest.raises(TypeError):
            TweetDeletedEvent(tweet_id=1)

    def test_media_deleted_needs_url(self):
        with pytest.raises(TypeError):
            TweetMediaDeletedEvent(tweet_id=1, user_id="u1")

    def test_fields_are_keyword_only(self):
        with pytest.raises(TypeError):
            TweetDeletedEvent(1, "u1")

    def test_optional_fields_default(self):
        event = TweetMediaDeletedEvent(tweet_id=1, user_id="u1", media_url="https://x")
        assert event.storage_prefix is None
        assert TweetDeletedEvent(tweet_id=1, user_id="u1").storage_prefixes == ()


class TestTweetMediaDeletedEvent:
    def test_event_type_and_summary(self):
        event = TweetMediaDeletedEvent(
            tweet_id=7, user_id="u2", media_url="https://x/img.jpg"
        )
        assert event.event_type == "TweetMediaDeleted"
        assert event.summary() == "Media https://x/img.jpg removed from tweet 7 by user u2"
        assert event.storage_prefix is None


class TestDomainEventContract:
    def test_subclass_without_event_type_rejected(self):
        with pytest.raises(TypeError, match="event_type"):
            @dataclass(frozen=True)
            class Nameless(DomainEvent):
                value: int = 0

    def test_subclass_with_event_type_accepted(self):
        @dataclass(frozen=True)
        class GymOpened(DomainEvent):
            event_type: ClassVar[str] = "GymOpened"
            gym_id: int = 0

        event = GymOpened(gym_id=3)
        assert event.event_type == "GymOpened"
        assert event.summary().startswith("GymOpened at ")


class TestEventRegistry:
    def test_registry_is_closed_set(self):
        assert set(EVENT_TYPES) == {"TweetDeleted", "TweetMediaDeleted"}

    def test_rebuild_from_dict(self):
        sent = TweetDeletedEvent(
            tweet_id=5, user_id="u1", storage_prefixes=("v1/public/users/u1/a",)
        )
        rebuilt = event_from_dict(sent.to_dict())

        assert isinstance(rebuilt, TweetDeletedEvent)
        assert rebuilt == sent
        assert rebuilt.occurred_at == sent.occurred_at

    def test_unknown_type_rejected(self):
        with pytest.raises(UnknownEventTypeError):
            event_from_dict({"event_type": "UserBlocked"})
