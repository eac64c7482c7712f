"""
GCS Storage Adapter

Architectural Intent:
- Implements StoragePort on Google Cloud Storage
- Worker-side half of media cleanup: removes every object under a prefix

Design Decisions:
- google-cloud-storage is synchronous; calls run in worker threads
- NotFound on delete counts as deleted so Cloud Tasks retries are idempotent
- Other per-object failures are collected, not raised, so one bad object
  does not block the rest of the prefix
"""

import asyncio
import logging
from typing import Any, Optional

from google.api_core.exceptions import NotFound
from google.cloud import storage

from bouldering.domain.ports.storage_port import PurgeResult

logger = logging.getLogger(__name__)


class GCSStorageAdapter:
    def __init__(self, bucket_name: str, client: Optional[Any] = None):
        self.bucket_name = bucket_name
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    async def delete_files_by_prefix(self, prefix: str) -> PurgeResult:
        client = self._get_client()
        logger.info("Starting GCS prefix deletion %s in %s", prefix, self.bucket_name)

        blobs = await asyncio.to_thread(
            lambda: list(client.list_blobs(self.bucket_name, prefix=prefix))
        )
        result = PurgeResult(prefix=prefix)
        if not blobs:
            logger.info("No files found for prefix %s", prefix)
            return result

        logger.info(
            "Found %d files for deletion under %s",
            len(blobs),
            prefix,
            extra={"file_names": [b.name for b in blobs[:5]]},
        )

        async def delete(blob: Any) -> None:
            try:
                await asyncio.to_thread(blob.delete)
            except NotFound:
                logger.debug("File already deleted: %s", blob.name)
            except Exception as e:
                logger.warning("Failed to delete %s: %s", blob.name, e)
                result.errors.append(f"Failed to delete {blob.name}: {e}")
                return
            result.deleted_count += 1

        await asyncio.gather(*(delete(b) for b in blobs))

        logger.info(
            "GCS prefix deletion completed for %s: %d deleted, %d errors",
            prefix,
            result.deleted_count,
            len(result.errors),
        )
        return result
