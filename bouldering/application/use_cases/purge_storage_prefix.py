"""
Purge Storage Prefix Use Case

Architectural Intent:
- Worker side of media cleanup, invoked by the Cloud Tasks endpoint
- Delegates to the storage port for the actual object deletion
"""

from bouldering.domain.errors import InvalidStoragePrefixError
from bouldering.domain.ports.storage_port import PurgeResult, StoragePort


class PurgeStoragePrefix:
    def __init__(self, storage: StoragePort):
        self.storage = storage

    async def execute(self, prefix: str) -> PurgeResult:
        if not prefix or not isinstance(prefix, str) or not prefix.strip("/"):
            raise InvalidStoragePrefixError("Valid prefix is required")
        return await self.storage.delete_files_by_prefix(prefix)
