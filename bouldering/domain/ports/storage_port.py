"""
Storage Port

Architectural Intent:
- Abstract interface over the media object store
- Deleting by prefix is idempotent: objects already gone count as deleted
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass
class PurgeResult:
    prefix: str
    deleted_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


@runtime_checkable
class StoragePort(Protocol):
    async def delete_files_by_prefix(self, prefix: str) -> PurgeResult: ...
