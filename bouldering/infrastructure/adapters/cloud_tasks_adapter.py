"""
Cloud Tasks Adapter

Architectural Intent:
- Implements TaskQueuePort on Google Cloud Tasks
- Each storage prefix becomes its own HTTP task so retries are per prefix
- Tasks POST {"prefix": ...} to the internal worker endpoint with an OIDC
  token for the configured service account

Design Decisions:
- The client is created lazily so constructing the adapter never
  touches credentials; tests inject a client
- The synchronous CloudTasksClient runs in worker threads; the web layer
  runs each request on a fresh event loop, so a cached client must not be
  bound to one
- Missing project / handler URL / service account is a configuration error
- create_task_queue() degrades to NullTaskQueue when the queue is not
  configured, so local development can delete tweets without GCP
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

from google.cloud import tasks_v2

from bouldering.domain.errors import TaskQueueConfigError
from bouldering.domain.ports.task_queue_port import TaskQueuePort
from bouldering.infrastructure.config import TasksConfig

logger = logging.getLogger(__name__)

SCHEDULE_DELAY_SECONDS = 1


class CloudTasksAdapter:
    def __init__(self, config: TasksConfig, client: Optional[Any] = None):
        if not config.is_configured:
            missing = ", ".join(config.missing_settings)
            logger.error("Missing required Cloud Tasks settings: %s", missing)
            raise TaskQueueConfigError(f"Missing required Cloud Tasks settings: {missing}")
        self.config = config
        self._client = client
        logger.info(
            "Cloud Tasks queue %s/%s/%s -> %s",
            config.project,
            config.location,
            config.queue,
            config.handler_url,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = tasks_v2.CloudTasksClient()
        return self._client

    def _build_task(self, prefix: str) -> dict[str, Any]:
        return {
            "http_request": {
                "http_method": tasks_v2.HttpMethod.POST,
                "url": self.config.handler_url,
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps({"prefix": prefix}).encode("utf-8"),
                "oidc_token": {
                    "service_account_email": self.config.service_account_email,
                },
            },
            "schedule_time": {"seconds": int(time.time()) + SCHEDULE_DELAY_SECONDS},
        }

    async def enqueue_delete_prefixes(self, prefixes: list[str]) -> None:
        unique = list(dict.fromkeys(p for p in prefixes if p))
        if not unique:
            logger.info("No prefixes to delete")
            return

        client = self._get_client()
        parent = client.queue_path(
            self.config.project, self.config.location, self.config.queue
        )
        logger.info(
            "Enqueueing %d GCS prefix deletion tasks on %s",
            len(unique),
            self.config.queue,
            extra={"prefixes": unique, "queue": self.config.queue},
        )

        async def create(prefix: str) -> None:
            try:
                await asyncio.to_thread(
                    client.create_task, parent=parent, task=self._build_task(prefix)
                )
            except Exception as e:
                logger.error("Failed to create GCS deletion task for %s: %s", prefix, e)
                raise
            logger.debug("GCS deletion task created for %s", prefix)

        await asyncio.gather(*(create(p) for p in unique))
        logger.info("All %d GCS deletion tasks enqueued", len(unique))


class NullTaskQueue:
    """Used when Cloud Tasks is not configured: logs and skips."""

    async def enqueue_delete_prefixes(self, prefixes: list[str]) -> None:
        logger.warning(
            "Storage cleanup queue not configured, skipping %d prefixes", len(prefixes)
        )


def create_task_queue(config: TasksConfig, client: Optional[Any] = None) -> TaskQueuePort:
    if not config.is_configured:
        logger.warning(
            "Storage cleanup publisher disabled - missing settings: %s",
            ", ".join(config.missing_settings),
        )
        return NullTaskQueue()
    return CloudTasksAdapter(config, client=client)
