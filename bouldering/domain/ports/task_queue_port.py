"""
Task Queue Port

Architectural Intent:
- Schedules storage cleanup outside the request that triggered it
- Implemented by Cloud Tasks in production and a logging no-op when disabled
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TaskQueuePort(Protocol):
    async def enqueue_delete_prefixes(self, prefixes: list[str]) -> None:
        """Schedule one deletion task per unique, non-empty prefix."""
        ...
