"""Storage providers.

The backend is selected once from configuration via create_provider().
"""

import asyncio

from storagemanager.config import ManagerConfig, ProviderType
from storagemanager.providers.base import StorageProvider


def create_provider(config: ManagerConfig, cancel: asyncio.Event | None = None) -> StorageProvider:
    """Create the storage provider selected by config.provider.

    Args:
        config: Manager configuration.
        cancel: Shutdown signal for providers with retry loops.
    """
    if config.provider == ProviderType.AZURE:
        from storagemanager.providers.azure import AzureBlobProvider

        return AzureBlobProvider(config.azure, config.retry, cancel=cancel)
    if config.provider == ProviderType.S3:
        from storagemanager.providers.s3 import S3PrefixProvider

        return S3PrefixProvider(config.s3)

    from storagemanager.providers.local import LocalDirProvider

    return LocalDirProvider(config.local)


__all__ = ["StorageProvider", "create_provider"]
