"""S3 object operations for the prefix-emulated provider.

All keys live in the one configured bucket. Folders are emulated by
zero-length marker objects whose key ends with "/".
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from aiobotocore.session import AioSession, get_session
from botocore.exceptions import ClientError
from types_aiobotocore_s3 import S3Client

from storagemanager.config import S3Config
from storagemanager.logging_schema import LogEvent

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})


def is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3Operations:
    """Bucket-scoped S3 calls sharing one aiobotocore session."""

    def __init__(self, config: S3Config, session: AioSession | None = None) -> None:
        self._config = config
        self._session = session or get_session()

    @property
    def bucket(self) -> str:
        return self._config.bucket

    @asynccontextmanager
    async def client(self) -> AsyncGenerator[S3Client, None]:
        async with self._session.create_client(
            "s3",
            endpoint_url=self._config.endpoint,
            aws_access_key_id=self._config.access_key,
            aws_secret_access_key=self._config.secret_key,
            region_name=self._config.region,
        ) as client:
            yield client

    async def init(self) -> None:
        """Create the bucket when it does not exist yet."""
        async with self.client() as s3:
            try:
                await s3.head_bucket(Bucket=self.bucket)
                return
            except ClientError as e:
                if not is_not_found(e):
                    raise
            await s3.create_bucket(Bucket=self.bucket)
        logger.info("Created bucket %s", self.bucket, extra={"bucket": self.bucket})

    async def list_objects(self, prefix: str) -> list[str]:
        async with self.client() as s3:
            paginator = s3.get_paginator("list_objects_v2")
            return [
                obj["Key"]
                async for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix)
                for obj in page.get("Contents", [])
            ]

    async def prefix_exists(self, prefix: str) -> bool:
        """Check whether any object lives under prefix."""
        async with self.client() as s3:
            response = await s3.list_objects_v2(Bucket=self.bucket, Prefix=prefix, MaxKeys=1)
        return response.get("KeyCount", 0) > 0

    async def object_exists(self, key: str) -> bool:
        async with self.client() as s3:
            try:
                await s3.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if is_not_found(e):
                    return False
                raise
        return True

    async def create_empty_object(self, key: str) -> None:
        """Create a folder marker."""
        async with self.client() as s3:
            await s3.put_object(Bucket=self.bucket, Key=key, Body=b"")
        logger.debug("S3 object created", extra={"event": LogEvent.S3_OBJECT_CREATED, "key": key})

    async def _delete_batch(self, s3: S3Client, keys: list[str]) -> list[str]:
        response = await s3.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": False},
        )
        for error in response.get("Errors", []):
            logger.warning(
                "Failed to delete S3 object %s: %s",
                error.get("Key"),
                error.get("Message"),
                extra={"event": LogEvent.S3_DELETE_FAILED, "key": error.get("Key")},
            )
        return [deleted["Key"] for deleted in response.get("Deleted", [])]

    async def delete_objects(self, keys: list[str]) -> list[str]:
        """Delete keys in requests of at most 1000. Returns the deleted keys."""
        deleted: list[str] = []
        if not keys:
            return deleted
        async with self.client() as s3:
            for start in range(0, len(keys), 1000):
                deleted.extend(await self._delete_batch(s3, keys[start : start + 1000]))
        return deleted

    async def delete_prefix(self, prefix: str) -> list[str]:
        """Delete every object under prefix, one listing page at a time."""
        deleted: list[str] = []
        async with self.client() as s3:
            paginator = s3.get_paginator("list_objects_v2")
            async for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys = [obj["Key"] for obj in page.get("Contents", [])]
                if keys:
                    deleted.extend(await self._delete_batch(s3, keys))
        logger.info(
            "Deleted %d objects under %s",
            len(deleted),
            prefix,
            extra={"event": LogEvent.S3_OBJECTS_DELETED, "prefix": prefix, "count": len(deleted)},
        )
        return deleted
