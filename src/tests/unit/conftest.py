"""Fixtures for storage manager unit tests."""

from collections.abc import Iterator

import pytest

from storagemanager.config import LocalConfig, RetryConfig, S3Config
from storagemanager.core.lock import reset_locks
from storagemanager.policies.manager import PolicyManager
from storagemanager.providers.local import LocalDirProvider
from storagemanager.providers.s3 import S3PrefixProvider

from tests.unit.fakes import TEST_BUCKET, FakeObjectStore, FakePolicyStore


@pytest.fixture(autouse=True)
def _reset_locks() -> Iterator[None]:
    reset_locks()
    yield
    reset_locks()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def policy_store() -> FakePolicyStore:
    return FakePolicyStore()


@pytest.fixture
def policy_manager(policy_store: FakePolicyStore) -> PolicyManager:
    return PolicyManager(policy_store, TEST_BUCKET)


@pytest.fixture
def s3_config() -> S3Config:
    return S3Config(
        endpoint="http://minio:9000",
        bucket=TEST_BUCKET,
        access_key="test-access-key",
        secret_key="test-secret-key",
    )


@pytest.fixture
def s3_provider(
    s3_config: S3Config,
    object_store: FakeObjectStore,
    policy_store: FakePolicyStore,
) -> S3PrefixProvider:
    return S3PrefixProvider(s3_config, s3=object_store, policy_store=policy_store)


@pytest.fixture
def local_provider(tmp_path) -> LocalDirProvider:
    return LocalDirProvider(LocalConfig(root=str(tmp_path)))


@pytest.fixture
def retry_config() -> RetryConfig:
    """Retry budget without real waiting."""
    return RetryConfig(max_retries=3, delay=0.0)
