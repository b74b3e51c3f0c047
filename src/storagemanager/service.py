"""Storage orchestrator sequencing provider and policy operations.

Operation order:
- create organization: storage, then loadingzone (unless implicit)
- create space: storage, scoped policies, public access (PUBLIC only)
- delete space: public access, storage, scoped policies
- delete organization: storage (the provider cascades to spaces and policies)

Every operation holds the organization lock for its whole sequence.
"""

import logging
import time
from collections.abc import Awaitable

from storagemanager.core.lock import get_organization_lock
from storagemanager.core.models import Confidentiality, Organization, Space
from storagemanager.core.naming import ResourceNaming
from storagemanager.logging_schema import LogEvent
from storagemanager.metrics import PROVIDER_DURATION, PROVIDER_ERRORS
from storagemanager.providers.base import StorageProvider

logger = logging.getLogger(__name__)


class StorageOrchestrator:
    """Entry point for organization and space storage lifecycle."""

    def __init__(self, provider: StorageProvider) -> None:
        self._provider = provider
        self._naming = ResourceNaming()

    @property
    def provider(self) -> StorageProvider:
        return self._provider

    async def _timed(self, operation: str, call: Awaitable[None]) -> None:
        provider = self._provider.name
        start = time.monotonic()
        try:
            await call
        except Exception as e:
            PROVIDER_ERRORS.labels(
                provider=provider, operation=operation, error_type=type(e).__name__
            ).inc()
            raise
        finally:
            PROVIDER_DURATION.labels(provider=provider, operation=operation).observe(
                time.monotonic() - start
            )

    async def create_organization_storage(self, name: str) -> None:
        organization = Organization(name=name)
        async with get_organization_lock(name):
            logger.info("Creating storage for organization '%s'", name)
            await self._timed(
                "create_organization",
                self._provider.create_organization_storage(organization),
            )
            if not self._provider.implicit_loadingzone:
                await self._timed(
                    "create_loadingzone",
                    self._provider.create_loadingzone(organization),
                )
            logger.info("Creating storage for organization '%s' ... successful", name)

    async def create_space_storage(
        self,
        organization: str,
        name: str,
        confidentiality: Confidentiality | None = None,
    ) -> None:
        space = Space(
            name=name,
            organization=Organization(name=organization),
            confidentiality=confidentiality,
        )
        async with get_organization_lock(organization):
            logger.info("Creating storage for space '%s' in '%s'", name, organization)
            await self._timed("create_space", self._provider.create_space_storage(space))

            policies = self._provider.policies
            if policies is not None and not self._naming.is_loadingzone(name):
                failed = await policies.create_scoped_policies(space)
                if failed:
                    logger.warning(
                        "Space '%s' created with missing policies: %s",
                        name,
                        ", ".join(failed),
                        extra={
                            "event": LogEvent.POLICY_PARTIAL_FAILURE,
                            "organization": organization,
                            "space": name,
                        },
                    )
                if space.is_public:
                    await policies.add_public_access(space)

            logger.info("Creating storage for space '%s' in '%s' ... successful", name, organization)

    async def delete_organization_storage(self, name: str) -> None:
        organization = Organization(name=name)
        async with get_organization_lock(name):
            logger.info("Deleting storage for organization '%s'", name)
            await self._timed(
                "delete_organization",
                self._provider.delete_organization_storage(organization),
            )
            logger.info("Deleting storage for organization '%s' ... successful", name)

    async def delete_space_storage(
        self,
        organization: str,
        name: str,
        confidentiality: Confidentiality | None = None,
    ) -> None:
        """Delete a space.

        When confidentiality is unknown, public statements are removed if the
        public access policy currently holds them.
        """
        space = Space(
            name=name,
            organization=Organization(name=organization),
            confidentiality=confidentiality,
        )
        async with get_organization_lock(organization):
            logger.info("Deleting storage for space '%s' in '%s'", name, organization)
            policies = self._provider.policies
            managed = policies is not None and not self._naming.is_loadingzone(name)

            if managed:
                if space.is_public or (
                    confidentiality is None and await policies.has_public_access(space)
                ):
                    await policies.remove_public_access(space)

            await self._timed("delete_space", self._provider.delete_space_storage(space))

            if managed:
                await policies.delete_scoped_policies(space)

            logger.info("Deleting storage for space '%s' in '%s' ... successful", name, organization)
