"""Tests for S3Operations with a mocked S3 client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from storagemanager.config import S3Config
from storagemanager.infra.s3 import S3Operations


@pytest.fixture
def mock_s3() -> MagicMock:
    s3 = MagicMock()
    s3.list_objects_v2 = AsyncMock(return_value={"KeyCount": 0})
    s3.head_object = AsyncMock()
    s3.put_object = AsyncMock()
    s3.delete_objects = AsyncMock(side_effect=lambda Bucket, Delete: {"Deleted": Delete["Objects"]})
    s3.head_bucket = AsyncMock()
    s3.create_bucket = AsyncMock()
    return s3


@pytest.fixture
def ops(mock_s3: MagicMock) -> S3Operations:
    session = MagicMock()
    session.create_client.return_value.__aenter__.return_value = mock_s3
    return S3Operations(S3Config(bucket="data"), session=session)


def _not_found() -> ClientError:
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")


class TestS3Operations:
    async def test_prefix_exists(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        assert await ops.prefix_exists("acme/") is False

        mock_s3.list_objects_v2.return_value = {"KeyCount": 1}
        assert await ops.prefix_exists("acme/") is True
        mock_s3.list_objects_v2.assert_awaited_with(Bucket="data", Prefix="acme/", MaxKeys=1)

    async def test_object_exists(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        assert await ops.object_exists("acme/") is True

        mock_s3.head_object.side_effect = _not_found()
        assert await ops.object_exists("acme/") is False

    async def test_create_empty_object(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        await ops.create_empty_object("acme/reports/")

        mock_s3.put_object.assert_awaited_once_with(Bucket="data", Key="acme/reports/", Body=b"")

    async def test_delete_objects_batches_by_1000(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        keys = [f"acme/file-{i}" for i in range(1500)]

        deleted = await ops.delete_objects(keys)

        assert deleted == keys
        assert mock_s3.delete_objects.await_count == 2

    async def test_delete_objects_empty(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        assert await ops.delete_objects([]) == []
        mock_s3.delete_objects.assert_not_awaited()

    async def test_init_creates_missing_bucket(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        mock_s3.head_bucket.side_effect = _not_found()

        await ops.init()

        mock_s3.create_bucket.assert_awaited_once_with(Bucket="data")

    async def test_init_keeps_existing_bucket(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        await ops.init()

        mock_s3.create_bucket.assert_not_awaited()

    async def test_object_exists_propagates_other_errors(
        self, ops: S3Operations, mock_s3: MagicMock
    ) -> None:
        mock_s3.head_object.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadObject"
        )

        with pytest.raises(ClientError):
            await ops.object_exists("acme/")

    async def test_init_propagates_access_denied(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        mock_s3.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadBucket"
        )

        with pytest.raises(ClientError):
            await ops.init()

        mock_s3.create_bucket.assert_not_awaited()

    async def test_delete_prefix_deletes_each_page(self, ops: S3Operations, mock_s3: MagicMock) -> None:
        pages = [
            {"Contents": [{"Key": "acme/"}, {"Key": "acme/reports/"}]},
            {"Contents": [{"Key": "acme/reports/a.csv"}]},
            {},
        ]

        async def paginate(**kwargs):
            assert kwargs == {"Bucket": "data", "Prefix": "acme/"}
            for page in pages:
                yield page

        mock_s3.get_paginator.return_value.paginate = paginate

        deleted = await ops.delete_prefix("acme/")

        assert deleted == ["acme/", "acme/reports/", "acme/reports/a.csv"]
        assert mock_s3.delete_objects.await_count == 2
