"""Azure storage provider.

Organization = storage account (name = organization name) in the configured
resource group, space = blob container inside that account. Accounts are
provisioned asynchronously by Azure, so container creation polls the
account's provisioning state through RetryExecutor.
"""

import asyncio
import logging
from typing import Any

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential
from azure.mgmt.storage.aio import StorageManagementClient
from azure.mgmt.storage.models import (
    BlobContainer,
    BlobServiceProperties,
    CorsRule,
    CorsRules,
    DateAfterCreation,
    DeleteRetentionPolicy,
    ManagementPolicy,
    ManagementPolicyAction,
    ManagementPolicyDefinition,
    ManagementPolicyFilter,
    ManagementPolicyRule,
    ManagementPolicySchema,
    ManagementPolicyVersion,
    ProvisioningState,
    Sku,
    StorageAccountCreateParameters,
)

from storagemanager.config import AzureConfig, RetryConfig
from storagemanager.core.models import Organization, Space
from storagemanager.core.naming import LOADINGZONE
from storagemanager.core.retry import RetryExecutor, RetryExhaustedError
from storagemanager.errors import ContainerProvisioningError, PermissionDeniedError, StorageManagerError
from storagemanager.logging_schema import LogEvent
from storagemanager.providers.azure_errors import is_permission_error, translate_error
from storagemanager.providers.base import StorageProvider

logger = logging.getLogger(__name__)

LIFECYCLE_RULE_NAME = "migrate-blob-versions-until-cool-archive-delete"
CORS_ALLOWED_METHODS = ["DELETE", "GET", "HEAD", "MERGE", "POST", "OPTIONS", "PUT", "PATCH"]


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, PermissionDeniedError):
        return False
    return not (isinstance(exc, HttpResponseError) and is_permission_error(exc))


class AzureBlobProvider(StorageProvider):
    """StorageProvider implementation using storage accounts and blob containers.

    Args:
        config: Resource group, region and account defaults.
        retry: Retry budget for container creation.
        client: Management client (created from DefaultAzureCredential if omitted).
        cancel: Shutdown signal that stops pending container retries.
    """

    name = "azure"

    def __init__(
        self,
        config: AzureConfig,
        retry: RetryConfig,
        client: Any | None = None,
        cancel: asyncio.Event | None = None,
    ) -> None:
        self._config = config
        self._retry = RetryExecutor(retry, is_retryable=_is_retryable)
        self._client = client
        self._credential: DefaultAzureCredential | None = None
        self._cancel = cancel

    def _get_client(self) -> Any:
        if self._client is None:
            self._credential = DefaultAzureCredential()
            self._client = StorageManagementClient(self._credential, self._config.subscription_id)
        return self._client

    async def close(self) -> None:
        if self._credential is not None:
            if self._client is not None:
                await self._client.close()
            await self._credential.close()
            self._client = None
            self._credential = None

    # =========================================================================
    # Organization (storage account)
    # =========================================================================

    async def create_organization_storage(self, organization: Organization) -> None:
        name = organization.name
        if await self._get_account(name) is not None:
            logger.warning(
                "Storage account '%s' already exists, nothing to do",
                name,
                extra={"event": LogEvent.ORGANIZATION_EXISTS, "organization": name},
            )
            return

        client = self._get_client()
        parameters = StorageAccountCreateParameters(
            sku=Sku(name="Standard_LRS"),
            kind="StorageV2",
            location=self._config.region,
        )
        try:
            poller = await client.storage_accounts.begin_create(
                self._config.resource_group, name, parameters
            )
            await poller.result()
            await self._configure_account(name)
        except HttpResponseError as e:
            logger.error(
                "Azure rejected storage account '%s': %s",
                name,
                e,
                extra={"event": LogEvent.BACKEND_ERROR, "organization": name},
            )
            raise translate_error(e) from e

        logger.info(
            "Storage account created",
            extra={"event": LogEvent.ORGANIZATION_CREATED, "organization": name},
        )

    async def _configure_account(self, account: str) -> None:
        """Apply versioning, soft delete, lifecycle and CORS defaults."""
        client = self._get_client()
        config = self._config
        rg = config.resource_group

        properties = BlobServiceProperties(
            is_versioning_enabled=config.versioning_blobs_enabled,
            delete_retention_policy=DeleteRetentionPolicy(
                enabled=config.soft_delete_blobs_enabled,
                days=config.retention_days_deleted_blobs if config.soft_delete_blobs_enabled else None,
            ),
            container_delete_retention_policy=DeleteRetentionPolicy(
                enabled=config.soft_delete_containers_enabled,
                days=(
                    config.retention_days_deleted_containers
                    if config.soft_delete_containers_enabled
                    else None
                ),
            ),
        )
        cors_rules = self._cors_rules()
        if cors_rules:
            properties.cors = CorsRules(cors_rules=cors_rules)
        await client.blob_services.set_service_properties(rg, account, parameters=properties)

        if config.versioning_blobs_enabled:
            await client.management_policies.create_or_update(
                rg,
                account,
                "default",
                properties=self._lifecycle_policy(),
            )

        logger.info(
            "Storage account configured",
            extra={"event": LogEvent.ACCOUNT_CONFIGURED, "organization": account},
        )

    def _lifecycle_policy(self) -> ManagementPolicy:
        config = self._config
        rule = ManagementPolicyRule(
            name=LIFECYCLE_RULE_NAME,
            enabled=True,
            type="Lifecycle",
            definition=ManagementPolicyDefinition(
                actions=ManagementPolicyAction(
                    version=ManagementPolicyVersion(
                        tier_to_cool=DateAfterCreation(
                            days_after_creation_greater_than=config.blob_versions_until_cool_tier_days
                        ),
                        tier_to_archive=DateAfterCreation(
                            days_after_creation_greater_than=config.blob_versions_until_archive_tier_days
                        ),
                        delete=DateAfterCreation(
                            days_after_creation_greater_than=config.blob_versions_until_delete_days
                        ),
                    )
                ),
                filters=ManagementPolicyFilter(blob_types=["blockBlob"]),
            ),
        )
        return ManagementPolicy(policy=ManagementPolicySchema(rules=[rule]))

    def _cors_rules(self) -> list[CorsRule]:
        return [
            CorsRule(
                allowed_origins=[origin],
                allowed_methods=CORS_ALLOWED_METHODS,
                max_age_in_seconds=self._config.cors_max_age,
                exposed_headers=["*"],
                allowed_headers=["*"],
            )
            for origin in self._config.cors_origins
        ]

    async def delete_organization_storage(self, organization: Organization) -> None:
        name = organization.name
        if await self._get_account(name) is None:
            logger.debug("Storage account '%s' does not exist, nothing to delete", name)
            return
        try:
            await self._get_client().storage_accounts.delete(self._config.resource_group, name)
        except HttpResponseError as e:
            raise translate_error(e) from e
        logger.info(
            "Storage account deleted",
            extra={"event": LogEvent.ORGANIZATION_DELETED, "organization": name},
        )

    # =========================================================================
    # Spaces (blob containers)
    # =========================================================================

    async def create_loadingzone(self, organization: Organization) -> None:
        await self._create_container(organization.name, LOADINGZONE)
        logger.info(
            "Loadingzone created",
            extra={"event": LogEvent.LOADINGZONE_CREATED, "organization": organization.name},
        )

    async def create_space_storage(self, space: Space) -> None:
        await self._create_container(space.organization.name, space.name)

    async def delete_space_storage(self, space: Space) -> None:
        org = space.organization.name
        if await self._get_account(org) is None or not await self._container_exists(org, space.name):
            logger.debug("Container '%s' in '%s' does not exist, nothing to delete", space.name, org)
            return
        try:
            await self._get_client().blob_containers.delete(
                self._config.resource_group, org, space.name
            )
        except HttpResponseError as e:
            raise translate_error(e) from e
        logger.info(
            "Container deleted",
            extra={"event": LogEvent.SPACE_DELETED, "organization": org, "space": space.name},
        )

    async def _create_container(self, account: str, container: str) -> None:
        client = self._get_client()

        async def attempt() -> bool:
            storage_account = await self._get_account(account)
            if storage_account is None:
                logger.debug("Storage account '%s' not found yet", account)
                return False
            if storage_account.provisioning_state != ProvisioningState.SUCCEEDED:
                logger.debug(
                    "Storage account '%s' is %s",
                    account,
                    storage_account.provisioning_state,
                )
                return False
            if await self._container_exists(account, container):
                logger.warning(
                    "Container '%s' already exists in '%s'",
                    container,
                    account,
                    extra={"event": LogEvent.SPACE_EXISTS, "organization": account, "space": container},
                )
                return True
            await client.blob_containers.create(
                self._config.resource_group, account, container, blob_container=BlobContainer()
            )
            logger.info(
                "Container created",
                extra={"event": LogEvent.SPACE_CREATED, "organization": account, "space": container},
            )
            return True

        try:
            outcome = await self._retry.run(attempt, cancel=self._cancel)
        except RetryExhaustedError as e:
            reason = e.last_error or "storage account not ready"
            if isinstance(reason, StorageManagerError):
                reason = reason.detail or reason.message
            raise ContainerProvisioningError(
                f"container '{container}' in storage account '{account}', reason '{reason}'"
            ) from e
        except HttpResponseError as e:
            raise translate_error(e) from e

        if outcome.cancelled:
            logger.warning(
                "Container creation for '%s' in '%s' cancelled by shutdown",
                container,
                account,
            )

    async def _get_account(self, name: str) -> Any | None:
        try:
            return await self._get_client().storage_accounts.get_properties(
                self._config.resource_group, name
            )
        except ResourceNotFoundError:
            return None
        except HttpResponseError as e:
            raise translate_error(e) from e

    async def _container_exists(self, account: str, container: str) -> bool:
        try:
            await self._get_client().blob_containers.get(
                self._config.resource_group, account, container
            )
        except ResourceNotFoundError:
            return False
        except HttpResponseError as e:
            raise translate_error(e) from e
        return True
