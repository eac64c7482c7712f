"""
SQLite Tweet Repository

Architectural Intent:
- Persistent tweet storage using SQLite (stdlib, zero external deps)
- Implements TweetRepositoryPort for the application use cases
- Ownership check and delete happen in one statement to avoid races

Design Decisions:
- Single database file at configurable path (default: bouldering.db)
- Auto-creates tables on first use; media rows cascade with their tweet
- storage_prefix is stored at insert time; legacy rows without one fall
  back to deriving it from media_url
- Timestamps stored as ISO 8601 strings
"""

from __future__ import annotations
import sqlite3
import logging
from datetime import date, datetime, UTC
from typing import Optional

from bouldering.domain.entities.tweet import Tweet, TweetMedia
from bouldering.domain.errors import (
    TweetMediaNotFoundError,
    TweetNotFoundError,
    TweetPermissionError,
)
from bouldering.domain.ports.tweet_repository_port import TweetRepositoryPort
from bouldering.domain.services.storage_path import derive_storage_prefix

logger = logging.getLogger(__name__)

_VIDEO_EXTENSIONS = (".mp4", ".mov", ".m4v", ".webm")


def _guess_media_type(media_url: str) -> str:
    return "video" if media_url.lower().endswith(_VIDEO_EXTENSIONS) else "image"


class SQLiteTweetRepository(TweetRepositoryPort):
    """Tweet persistence using SQLite."""

    def __init__(self, db_path: str = "bouldering.db"):
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Open database connection and create tables."""
        self._conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.row_factory = sqlite3.Row
        self._create_tables()
        logger.info("SQLite tweet repository connected: %s", self._db_path)

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _create_tables(self) -> None:
        assert self._conn is not None
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS tweets (
                tweet_id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                gym_id INTEGER NOT NULL,
                tweet_contents TEXT NOT NULL,
                visited_date TEXT,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS tweet_media (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                tweet_id INTEGER NOT NULL
                    REFERENCES tweets(tweet_id) ON DELETE CASCADE,
                media_url TEXT NOT NULL,
                media_type TEXT NOT NULL,
                display_order INTEGER NOT NULL DEFAULT 0,
                storage_prefix TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_tweets_user ON tweets(user_id);
            CREATE INDEX IF NOT EXISTS idx_media_tweet ON tweet_media(tweet_id);
        """)

    # -- Reads ---------------------------------------------------------------

    def _load_media(self, tweet_id: int) -> tuple[TweetMedia, ...]:
        assert self._conn is not None
        rows = self._conn.execute(
            """SELECT media_url, media_type, display_order, storage_prefix
               FROM tweet_media WHERE tweet_id = ? ORDER BY display_order""",
            (tweet_id,),
        ).fetchall()
        return tuple(
            TweetMedia(
                media_url=r["media_url"],
                media_type=r["media_type"],
                display_order=r["display_order"],
                storage_prefix=r["storage_prefix"],
            )
            for r in rows
        )

    def _row_to_tweet(self, row: sqlite3.Row) -> Tweet:
        return Tweet(
            tweet_id=row["tweet_id"],
            user_id=row["user_id"],
            gym_id=row["gym_id"],
            contents=row["tweet_contents"],
            created_at=datetime.fromisoformat(row["created_at"]),
            visited_date=(
                date.fromisoformat(row["visited_date"]) if row["visited_date"] else None
            ),
            media=self._load_media(row["tweet_id"]),
        )

    def _owner_of(self, tweet_id: int) -> Optional[str]:
        assert self._conn is not None
        row = self._conn.execute(
            "SELECT user_id FROM tweets WHERE tweet_id = ?", (tweet_id,)
        ).fetchone()
        return row["user_id"] if row else None

    def _check_owner(self, tweet_id: int, user_id: str, action: str) -> None:
        owner = self._owner_of(tweet_id)
        if owner is None:
            raise TweetNotFoundError("Tweet not found")
        if owner != user_id:
            raise TweetPermissionError(f"You can only {action} your own tweets")

    async def get_tweet_by_id(self, tweet_id: int) -> Optional[Tweet]:
        assert self._conn is not None
        row = self._conn.execute(
            "SELECT * FROM tweets WHERE tweet_id = ?", (tweet_id,)
        ).fetchone()
        return self._row_to_tweet(row) if row else None

    async def get_user_tweets(self, user_id: str, limit: int = 20) -> list[Tweet]:
        assert self._conn is not None
        rows = self._conn.execute(
            """SELECT * FROM tweets WHERE user_id = ?
               ORDER BY created_at DESC, tweet_id DESC LIMIT ?""",
            (user_id, limit),
        ).fetchall()
        return [self._row_to_tweet(r) for r in rows]

    async def get_tweet_storage_prefixes(self, tweet_id: int) -> list[str]:
        assert self._conn is not None
        rows = self._conn.execute(
            """SELECT storage_prefix, media_url FROM tweet_media
               WHERE tweet_id = ? ORDER BY display_order""",
            (tweet_id,),
        ).fetchall()

        prefixes: list[str] = []
        for row in rows:
            prefix = row["storage_prefix"] or derive_storage_prefix(row["media_url"])
            if prefix and prefix not in prefixes:
                prefixes.append(prefix)
        return prefixes

    # -- Writes --------------------------------------------------------------

    async def create_tweet(
        self,
        user_id: str,
        gym_id: int,
        contents: str,
        visited_date: Optional[date] = None,
        media_urls: Optional[list[str]] = None,
    ) -> Tweet:
        assert self._conn is not None
        with self._conn:
            cursor = self._conn.execute(
                """INSERT INTO tweets
                   (user_id, gym_id, tweet_contents, visited_date, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    user_id,
                    gym_id,
                    contents,
                    visited_date.isoformat() if visited_date else None,
                    datetime.now(UTC).isoformat(),
                ),
            )
            tweet_id = cursor.lastrowid
            for order, url in enumerate(media_urls or []):
                self._conn.execute(
                    """INSERT INTO tweet_media
                       (tweet_id, media_url, media_type, display_order, storage_prefix)
                       VALUES (?, ?, ?, ?, ?)""",
                    (tweet_id, url, _guess_media_type(url), order,
                     derive_storage_prefix(url)),
                )

        logger.info("Tweet %d created by %s", tweet_id, user_id)
        tweet = await self.get_tweet_by_id(tweet_id)
        assert tweet is not None
        return tweet

    async def delete_tweet(self, tweet_id: int, user_id: str) -> None:
        assert self._conn is not None
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM tweets WHERE tweet_id = ? AND user_id = ?",
                (tweet_id, user_id),
            )
        if cursor.rowcount == 0:
            self._check_owner(tweet_id, user_id, "delete")
        logger.info("Tweet %d deleted from database by %s", tweet_id, user_id)

    async def add_tweet_media(
        self, tweet_id: int, user_id: str, media_url: str, media_type: str
    ) -> None:
        assert self._conn is not None
        self._check_owner(tweet_id, user_id, "add media to")
        with self._conn:
            row = self._conn.execute(
                """SELECT COALESCE(MAX(display_order), -1) AS max_order
                   FROM tweet_media WHERE tweet_id = ?""",
                (tweet_id,),
            ).fetchone()
            self._conn.execute(
                """INSERT INTO tweet_media
                   (tweet_id, media_url, media_type, display_order, storage_prefix)
                   VALUES (?, ?, ?, ?, ?)""",
                (tweet_id, media_url, media_type, row["max_order"] + 1,
                 derive_storage_prefix(media_url)),
            )
        logger.info("Media %s added to tweet %d", media_url, tweet_id)

    async def delete_tweet_media(
        self, tweet_id: int, user_id: str, media_url: str
    ) -> None:
        assert self._conn is not None
        self._check_owner(tweet_id, user_id, "delete media from")
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM tweet_media WHERE tweet_id = ? AND media_url = ?",
                (tweet_id, media_url),
            )
        if cursor.rowcount == 0:
            raise TweetMediaNotFoundError("Media not found in tweet")
        logger.info("Media %s deleted from tweet %d", media_url, tweet_id)
