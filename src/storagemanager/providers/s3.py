"""Prefix-emulated object storage provider.

All organizations share one bucket. An organization is the key prefix
"{org}/", a space is "{org}/{space}/". Storage exists when any object lives
under its prefix; a zero-length object at the prefix key marks an empty
virtual folder. Space access is governed by IAM policies.
"""

import logging
import re

from storagemanager.config import S3Config
from storagemanager.core.models import NAME_PATTERN, Organization, Space
from storagemanager.core.naming import LOADINGZONE, ResourceNaming
from storagemanager.errors import OrganizationStorageMissingError
from storagemanager.infra.iam import IamPolicyStore
from storagemanager.infra.s3 import S3Operations
from storagemanager.logging_schema import LogEvent
from storagemanager.policies.manager import PolicyManager
from storagemanager.policies.store import PolicyStore
from storagemanager.providers.base import StorageProvider

logger = logging.getLogger(__name__)


class S3PrefixProvider(StorageProvider):
    """StorageProvider implementation using key prefixes in one bucket."""

    name = "s3"
    implicit_loadingzone = True

    def __init__(
        self,
        config: S3Config,
        s3: S3Operations | None = None,
        policy_store: PolicyStore | None = None,
    ) -> None:
        self._config = config
        self._s3 = s3 or S3Operations(config)
        self._naming = ResourceNaming()
        self._policies = PolicyManager(policy_store or IamPolicyStore(config), config.bucket)

    @property
    def policies(self) -> PolicyManager:
        return self._policies

    async def init(self) -> None:
        await self._s3.init()

    async def create_organization_storage(self, organization: Organization) -> None:
        prefix = self._naming.organization_prefix(organization.name)
        if await self._s3.prefix_exists(prefix):
            logger.warning(
                "Organization '%s' already exists",
                organization.name,
                extra={"event": LogEvent.ORGANIZATION_EXISTS, "organization": organization.name},
            )
        if not await self._s3.object_exists(prefix):
            await self._s3.create_empty_object(prefix)
            logger.info(
                "Organization folder created",
                extra={"event": LogEvent.ORGANIZATION_CREATED, "organization": organization.name},
            )
        await self.create_loadingzone(organization)

    async def create_loadingzone(self, organization: Organization) -> None:
        key = self._naming.space_prefix(organization.name, LOADINGZONE)
        if await self._s3.object_exists(key):
            return
        await self._s3.create_empty_object(key)
        logger.info(
            "Loadingzone created",
            extra={"event": LogEvent.LOADINGZONE_CREATED, "organization": organization.name},
        )

    async def create_space_storage(self, space: Space) -> None:
        if self._naming.is_loadingzone(space.name):
            return

        org = space.organization.name
        if not await self._s3.prefix_exists(self._naming.organization_prefix(org)):
            logger.error(
                "Organization '%s' does not exist, cannot create space '%s'",
                org,
                space.name,
                extra={"event": LogEvent.ORGANIZATION_MISSING, "organization": org},
            )
            raise OrganizationStorageMissingError(org)

        prefix = self._naming.space_prefix(org, space.name)
        if await self._s3.prefix_exists(prefix):
            logger.warning(
                "Space '%s' already exists in organization '%s'",
                space.name,
                org,
                extra={"event": LogEvent.SPACE_EXISTS, "organization": org, "space": space.name},
            )
            return

        await self._s3.create_empty_object(prefix)
        logger.info(
            "Space folder created",
            extra={"event": LogEvent.SPACE_CREATED, "organization": org, "space": space.name},
        )

    async def _list_spaces(self, organization: Organization) -> list[Space]:
        names: set[str] = set()
        for key in await self._s3.list_objects(self._naming.organization_prefix(organization.name)):
            name = self._naming.space_from_key(organization.name, key)
            if not name or len(name) > 63 or not re.fullmatch(NAME_PATTERN, name):
                continue
            if not self._naming.is_loadingzone(name):
                names.add(name)
        return [Space(name=name, organization=organization) for name in sorted(names)]

    async def delete_organization_storage(self, organization: Organization) -> None:
        """Delete the organization prefix and the policies of its spaces.

        Policies are resolved from the space folders found under the prefix.
        Names are never matched by "{org}_" since another organization may
        start with it (acme and acme_eu).
        """
        spaces = await self._list_spaces(organization)
        await self._policies.release_public_access(spaces)
        await self._s3.delete_prefix(self._naming.organization_prefix(organization.name))
        for space in spaces:
            await self._policies.delete_scoped_policies(space)
        logger.info(
            "Organization deleted",
            extra={"event": LogEvent.ORGANIZATION_DELETED, "organization": organization.name},
        )

    async def delete_space_storage(self, space: Space) -> None:
        org = space.organization.name
        await self._s3.delete_prefix(self._naming.space_prefix(org, space.name))
        logger.info(
            "Space deleted",
            extra={"event": LogEvent.SPACE_DELETED, "organization": org, "space": space.name},
        )
