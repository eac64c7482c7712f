"""
Event Outbox

Architectural Intent:
- Durable alternative to awaiting handlers inside the request
- Publishing stores the event; a relay pass dispatches it through the bus
- Callers that need the handlers' outcome can still ask for join-all
  dispatch with publish(event, wait=True)

Design Decisions:
- SQLite table shared by web process and relay (WAL mode)
- A failed dispatch stays PENDING until max_attempts, then becomes FAILED
- Payloads are DomainEvent.to_dict() JSON, rebuilt with event_from_dict
"""

from __future__ import annotations
import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Optional

from bouldering.domain.events import event_from_dict
from bouldering.domain.events.event_base import DomainEvent
from bouldering.domain.ports.event_bus_port import AsyncEventHandler
from bouldering.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)


class OutboxStatus(str, Enum):
    PENDING = "PENDING"
    DISPATCHED = "DISPATCHED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class OutboxRecord:
    id: int
    event_type: str
    payload: dict[str, Any]
    status: OutboxStatus
    attempts: int
    last_error: Optional[str]
    created_at: str


class SQLiteOutbox:
    """Outbox table for domain events."""

    def __init__(self, db_path: str = "bouldering-outbox.db"):
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS event_outbox (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                event_type TEXT NOT NULL,
                payload TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'PENDING',
                attempts INTEGER NOT NULL DEFAULT 0,
                last_error TEXT,
                created_at TEXT NOT NULL,
                dispatched_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_outbox_status ON event_outbox(status, id);
        """)
        logger.info("Event outbox connected: %s", self._db_path)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def enqueue(self, event: DomainEvent) -> int:
        """Store an event for later dispatch. Returns the outbox row ID."""
        assert self._conn is not None
        with self._conn:
            cursor = self._conn.execute(
                """INSERT INTO event_outbox (event_type, payload, created_at)
                   VALUES (?, ?, ?)""",
                (event.event_type, json.dumps(event.to_dict()),
                 datetime.now(UTC).isoformat()),
            )
        return cursor.lastrowid

    def fetch_pending(self, limit: int = 100) -> list[OutboxRecord]:
        assert self._conn is not None
        rows = self._conn.execute(
            "SELECT * FROM event_outbox WHERE status = ? ORDER BY id LIMIT ?",
            (OutboxStatus.PENDING.value, limit),
        ).fetchall()
        return [
            OutboxRecord(
                id=r["id"],
                event_type=r["event_type"],
                payload=json.loads(r["payload"]),
                status=OutboxStatus(r["status"]),
                attempts=r["attempts"],
                last_error=r["last_error"],
                created_at=r["created_at"],
            )
            for r in rows
        ]

    def mark_dispatched(self, record_id: int) -> None:
        assert self._conn is not None
        with self._conn:
            self._conn.execute(
                """UPDATE event_outbox
                   SET status = ?, attempts = attempts + 1, dispatched_at = ?
                   WHERE id = ?""",
                (OutboxStatus.DISPATCHED.value, datetime.now(UTC).isoformat(),
                 record_id),
            )

    def mark_failed(self, record_id: int, error: str, max_attempts: int) -> OutboxStatus:
        """Record a failed attempt. Returns the row's new status."""
        assert self._conn is not None
        with self._conn:
            self._conn.execute(
                """UPDATE event_outbox
                   SET attempts = attempts + 1, last_error = ?,
                       status = CASE WHEN attempts + 1 >= ? THEN ? ELSE status END
                   WHERE id = ?""",
                (error, max_attempts, OutboxStatus.FAILED.value, record_id),
            )
            row = self._conn.execute(
                "SELECT status FROM event_outbox WHERE id = ?", (record_id,)
            ).fetchone()
        return OutboxStatus(row["status"])

    def count(self, status: Optional[OutboxStatus] = None) -> int:
        assert self._conn is not None
        if status:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM event_outbox WHERE status = ?", (status.value,)
            ).fetchone()
        else:
            row = self._conn.execute("SELECT COUNT(*) FROM event_outbox").fetchone()
        return row[0]


class OutboxEventPublisher:
    """EventBusPort that stores events instead of dispatching inline."""

    def __init__(self, outbox: SQLiteOutbox, bus: EventBus) -> None:
        self.outbox = outbox
        self.bus = bus

    async def publish(self, event: DomainEvent, wait: bool = False) -> None:
        if wait:
            await self.bus.publish(event)
            return
        record_id = self.outbox.enqueue(event)
        logger.info(
            "Event %s stored in outbox as #%d: %s",
            event.event_type,
            record_id,
            event.summary(),
            extra={"event_type": event.event_type, "outbox_id": record_id},
        )

    def subscribe(self, event_type: str, handler: AsyncEventHandler) -> None:
        self.bus.subscribe(event_type, handler)


class OutboxRelay:
    """Dispatches pending outbox rows through the event bus."""

    def __init__(self, outbox: SQLiteOutbox, bus: EventBus, max_attempts: int = 5):
        self.outbox = outbox
        self.bus = bus
        self.max_attempts = max_attempts

    async def relay_once(self, limit: int = 100) -> int:
        """Run one relay pass. Returns the number of events dispatched."""
        dispatched = 0
        for record in self.outbox.fetch_pending(limit):
            try:
                event = event_from_dict(record.payload)
                await self.bus.publish(event)
            except Exception as e:
                status = self.outbox.mark_failed(record.id, str(e), self.max_attempts)
                logger.warning(
                    "Outbox event #%d (%s) failed on attempt %d: %s",
                    record.id,
                    record.event_type,
                    record.attempts + 1,
                    e,
                    extra={"event_type": record.event_type, "outbox_status": status.value},
                )
                continue
            self.outbox.mark_dispatched(record.id)
            dispatched += 1

        if dispatched:
            logger.info("Outbox relay dispatched %d events", dispatched)
        return dispatched
