"""Tests for the GCS storage adapter (client mocked)."""

import pytest
from unittest.mock import MagicMock

from google.api_core.exceptions import NotFound

from bouldering.infrastructure.adapters.gcs_storage_adapter import GCSStorageAdapter


def _blob(name, side_effect=None):
    blob = MagicMock()
    blob.name = name
    blob.delete = MagicMock(side_effect=side_effect)
    return blob


class TestGCSStorageAdapter:
    @pytest.mark.asyncio
    async def test_deletes_all_blobs(self):
        blobs = [_blob("v1/public/u1/a.jpg"), _blob("v1/public/u1/b.jpg")]
        client = MagicMock()
        client.list_blobs = MagicMock(return_value=iter(blobs))
        adapter = GCSStorageAdapter("climb-media", client=client)

        result = await adapter.delete_files_by_prefix("v1/public/u1")

        client.list_blobs.assert_called_once_with("climb-media", prefix="v1/public/u1")
        for blob in blobs:
            blob.delete.assert_called_once()
        assert result.deleted_count == 2
        assert result.succeeded

    @pytest.mark.asyncio
    async def test_empty_prefix_listing(self):
        client = MagicMock()
        client.list_blobs = MagicMock(return_value=iter([]))

        result = await GCSStorageAdapter("b", client=client).delete_files_by_prefix("x/y")

        assert result.deleted_count == 0
        assert result.succeeded

    @pytest.mark.asyncio
    async def test_not_found_counts_as_deleted(self):
        client = MagicMock()
        client.list_blobs = MagicMock(
            return_value=iter([_blob("gone.jpg", side_effect=NotFound("gone"))])
        )

        result = await GCSStorageAdapter("b", client=client).delete_files_by_prefix("x")

        assert result.deleted_count == 1
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_other_errors_collected(self):
        client = MagicMock()
        client.list_blobs = MagicMock(return_value=iter([
            _blob("ok.jpg"),
            _blob("bad.jpg", side_effect=RuntimeError("503")),
        ]))

        result = await GCSStorageAdapter("b", client=client).delete_files_by_prefix("x")

        assert result.deleted_count == 1
        assert len(result.errors) == 1
        assert "bad.jpg" in result.errors[0]
        assert not result.succeeded
