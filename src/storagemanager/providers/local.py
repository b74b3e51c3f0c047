"""Local filesystem storage provider.

Organization = directory under the configured root, space = directory inside
the organization directory.
"""

import asyncio
import logging
import shutil
from pathlib import Path

from storagemanager.config import LocalConfig
from storagemanager.core.models import Organization, Space
from storagemanager.core.naming import LOADINGZONE
from storagemanager.errors import UnknownStorageError
from storagemanager.logging_schema import LogEvent
from storagemanager.providers.base import StorageProvider

logger = logging.getLogger(__name__)


class LocalDirProvider(StorageProvider):
    """StorageProvider implementation backed by local directories."""

    name = "local"

    def __init__(self, config: LocalConfig) -> None:
        self._root = Path(config.root)

    @property
    def root(self) -> Path:
        return self._root

    def _organization_dir(self, organization: str) -> Path:
        return self._root / organization

    def _space_dir(self, organization: str, space: str) -> Path:
        return self._root / organization / space

    async def create_organization_storage(self, organization: Organization) -> None:
        path = self._organization_dir(organization.name)
        if await asyncio.to_thread(path.is_dir):
            logger.warning(
                "Organization directory '%s' already exists",
                path,
                extra={"event": LogEvent.ORGANIZATION_EXISTS, "organization": organization.name},
            )
            return
        await self._mkdir(path)
        logger.info(
            "Organization directory created",
            extra={"event": LogEvent.ORGANIZATION_CREATED, "organization": organization.name},
        )

    async def create_loadingzone(self, organization: Organization) -> None:
        await self.create_space_storage(Space(name=LOADINGZONE, organization=organization))

    async def create_space_storage(self, space: Space) -> None:
        path = self._space_dir(space.organization.name, space.name)
        if await asyncio.to_thread(path.is_dir):
            logger.warning(
                "Space directory '%s' already exists",
                path,
                extra={
                    "event": LogEvent.SPACE_EXISTS,
                    "organization": space.organization.name,
                    "space": space.name,
                },
            )
            return
        # parents=True creates the organization directory when absent
        await self._mkdir(path)
        logger.info(
            "Space directory created",
            extra={
                "event": LogEvent.SPACE_CREATED,
                "organization": space.organization.name,
                "space": space.name,
            },
        )

    async def delete_organization_storage(self, organization: Organization) -> None:
        path = self._organization_dir(organization.name)
        if await self._rmtree(path):
            logger.info(
                "Organization directory deleted",
                extra={"event": LogEvent.ORGANIZATION_DELETED, "organization": organization.name},
            )

    async def delete_space_storage(self, space: Space) -> None:
        path = self._space_dir(space.organization.name, space.name)
        if await self._rmtree(path):
            logger.info(
                "Space directory deleted",
                extra={
                    "event": LogEvent.SPACE_DELETED,
                    "organization": space.organization.name,
                    "space": space.name,
                },
            )

    async def _mkdir(self, path: Path) -> None:
        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create directory %s: %s", path, e)
            raise UnknownStorageError(str(e)) from e

    async def _rmtree(self, path: Path) -> bool:
        """Remove path recursively. Returns False if it did not exist."""
        if not await asyncio.to_thread(path.exists):
            logger.debug("Directory %s does not exist, nothing to delete", path)
            return False
        try:
            await asyncio.to_thread(shutil.rmtree, path)
        except OSError as e:
            logger.error("Failed to delete directory %s: %s", path, e)
            raise UnknownStorageError(str(e)) from e
        return True
