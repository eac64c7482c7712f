"""Tests for the Cloud Tasks adapter (client mocked)."""

import asyncio
import json

import pytest
from unittest.mock import MagicMock, patch

from google.cloud import tasks_v2

from bouldering.domain.errors import TaskQueueConfigError
from bouldering.infrastructure.adapters.cloud_tasks_adapter import (
    CloudTasksAdapter,
    NullTaskQueue,
    create_task_queue,
)
from bouldering.infrastructure.config import TasksConfig

CONFIG = TasksConfig(
    project="climb-prod",
    location="asia-northeast1",
    queue="gcs-delete-queue",
    handler_url="https://api.example.com/internal/tasks/gcs-delete-prefix",
    service_account_email="tasks@climb-prod.iam.gserviceaccount.com",
)


@pytest.fixture
def client():
    mock = MagicMock()
    mock.queue_path = MagicMock(
        return_value="projects/climb-prod/locations/asia-northeast1/queues/gcs-delete-queue"
    )
    mock.create_task = MagicMock(return_value=MagicMock(name="task"))
    return mock


class TestCloudTasksAdapter:
    def test_requires_configuration(self):
        with pytest.raises(TaskQueueConfigError, match="handler_url"):
            CloudTasksAdapter(TasksConfig(project="p", service_account_email="a@b"))

    @pytest.mark.asyncio
    async def test_one_task_per_unique_prefix(self, client):
        adapter = CloudTasksAdapter(CONFIG, client=client)

        await adapter.enqueue_delete_prefixes(["a/b", "c/d", "a/b", ""])

        client.queue_path.assert_called_once_with(
            "climb-prod", "asia-northeast1", "gcs-delete-queue"
        )
        assert client.create_task.call_count == 2
        bodies = sorted(
            json.loads(call.kwargs["task"]["http_request"]["body"])["prefix"]
            for call in client.create_task.call_args_list
        )
        assert bodies == ["a/b", "c/d"]

    @pytest.mark.asyncio
    async def test_task_shape(self, client):
        adapter = CloudTasksAdapter(CONFIG, client=client)

        await adapter.enqueue_delete_prefixes(["v1/public/users/u1"])

        call = client.create_task.call_args
        assert call.kwargs["parent"] == client.queue_path.return_value
        request = call.kwargs["task"]["http_request"]
        assert request["http_method"] == tasks_v2.HttpMethod.POST
        assert request["url"] == CONFIG.handler_url
        assert request["headers"] == {"Content-Type": "application/json"}
        assert request["oidc_token"]["service_account_email"] == CONFIG.service_account_email
        assert "seconds" in call.kwargs["task"]["schedule_time"]

    @pytest.mark.asyncio
    async def test_empty_list_is_noop(self, client):
        adapter = CloudTasksAdapter(CONFIG, client=client)

        await adapter.enqueue_delete_prefixes([])

        client.create_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_failure_propagates(self, client):
        client.create_task = MagicMock(side_effect=RuntimeError("permission denied"))
        adapter = CloudTasksAdapter(CONFIG, client=client)

        with pytest.raises(RuntimeError, match="permission denied"):
            await adapter.enqueue_delete_prefixes(["a/b"])


class TestCreateTaskQueue:
    def test_unconfigured_returns_null_queue(self):
        assert isinstance(create_task_queue(TasksConfig()), NullTaskQueue)

    def test_configured_returns_adapter(self, client):
        queue = create_task_queue(CONFIG, client=client)
        assert isinstance(queue, CloudTasksAdapter)

    @pytest.mark.asyncio
    async def test_null_queue_accepts_prefixes(self):
        await NullTaskQueue().enqueue_delete_prefixes(["a/b"])


class TestClientAcrossEventLoops:
    """The web layer drives each request with its own asyncio.run()."""

    def test_lazy_client_survives_successive_loops(self):
        client = MagicMock()
        client.queue_path = MagicMock(return_value="projects/p/locations/l/queues/q")
        client.create_task = MagicMock(return_value=MagicMock(name="task"))

        with patch(
            "bouldering.infrastructure.adapters.cloud_tasks_adapter.tasks_v2.CloudTasksClient",
            return_value=client,
        ) as factory:
            adapter = CloudTasksAdapter(CONFIG)
            asyncio.run(adapter.enqueue_delete_prefixes(["v1/public/a/b"]))
            asyncio.run(adapter.enqueue_delete_prefixes(["v1/public/c/d"]))

        factory.assert_called_once_with()
        assert client.create_task.call_count == 2

    def test_uses_synchronous_client(self):
        with patch(
            "bouldering.infrastructure.adapters.cloud_tasks_adapter.tasks_v2.CloudTasksClient"
        ) as sync_factory, patch(
            "bouldering.infrastructure.adapters.cloud_tasks_adapter.tasks_v2.CloudTasksAsyncClient"
        ) as async_factory:
            CloudTasksAdapter(CONFIG)._get_client()

        sync_factory.assert_called_once_with()
        async_factory.assert_not_called()
