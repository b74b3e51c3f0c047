"""Access policy manager for space-scoped and public access policies.

Every space owns four scoped policies named {organization}_{space}_{role}.
PUBLIC spaces additionally contribute statements to one shared aggregate
policy (spc_all_public). The aggregate is replaced by delete-then-recreate
since the backend has no partial update for policy documents.
"""

import asyncio
import logging
from collections.abc import Iterable

from storagemanager.core.models import Space
from storagemanager.core.naming import POLICY_ROLES, PUBLIC_POLICY_NAME, ResourceNaming
from storagemanager.errors import MultiplePoliciesError, PolicyNotFoundError
from storagemanager.logging_schema import LogEvent
from storagemanager.metrics import POLICY_OPERATIONS
from storagemanager.policies.document import PolicyDocument, Statement
from storagemanager.policies.store import PolicyStore
from storagemanager.policies.templates import (
    ALL_PUBLIC_TEMPLATE,
    ROLE_TEMPLATES,
    SPACE_PUBLIC_TEMPLATE,
    render_statements,
    render_template,
)

logger = logging.getLogger(__name__)


class PolicyManager:
    """Creates, merges and removes access policies of spaces."""

    def __init__(self, store: PolicyStore, bucket: str) -> None:
        self._store = store
        self._bucket = bucket
        self._naming = ResourceNaming()
        # Serializes read-modify-write of the shared aggregate
        self._aggregate_lock = asyncio.Lock()

    @property
    def store(self) -> PolicyStore:
        return self._store

    # =========================================================================
    # Scoped policies
    # =========================================================================

    async def create_scoped_policies(self, space: Space) -> list[str]:
        """Create the admin/trustee/user/supplier policies of a space.

        Each role is attempted independently. Failures are logged and not
        rolled back.

        Returns:
            Roles whose policy could not be created.
        """
        org = space.organization.name
        failed: list[str] = []
        for role in POLICY_ROLES:
            name = self._naming.policy_name(org, space.name, role)
            try:
                document = render_template(ROLE_TEMPLATES[role], self._bucket, org, space.name)
                await self._store.create_policy(name, document)
            except Exception as e:
                failed.append(role)
                logger.error(
                    "Error creating policy %s for space '%s': %s",
                    name,
                    space.name,
                    e,
                    extra={
                        "event": LogEvent.POLICY_PARTIAL_FAILURE,
                        "organization": org,
                        "space": space.name,
                        "role": role,
                    },
                )
                continue
            POLICY_OPERATIONS.labels(operation="create").inc()
            logger.info(
                "Policy created",
                extra={"event": LogEvent.POLICY_CREATED, "policy": name, "space": space.name},
            )
        return failed

    async def delete_scoped_policies(self, space: Space) -> None:
        """Delete all four scoped policies of a space (absent ones are skipped)."""
        org = space.organization.name
        for role in POLICY_ROLES:
            name = self._naming.policy_name(org, space.name, role)
            await self._store.delete_policy(name)
            POLICY_OPERATIONS.labels(operation="delete").inc()
            logger.info(
                "Policy deleted",
                extra={"event": LogEvent.POLICY_DELETED, "policy": name, "space": space.name},
            )

    # =========================================================================
    # Public access aggregate
    # =========================================================================

    async def add_public_access(self, space: Space) -> None:
        """Merge the space's public statements into the aggregate policy.

        The aggregate is created from its skeleton template on first use.

        Raises:
            PolicyNotFoundError: Aggregate still missing after creation.
            MultiplePoliciesError: Aggregate name is ambiguous.
        """
        async with self._aggregate_lock:
            if not await self._aggregate_names():
                skeleton = render_template(
                    ALL_PUBLIC_TEMPLATE, self._bucket, space.organization.name, space.name
                )
                await self._store.create_policy(PUBLIC_POLICY_NAME, skeleton)
                logger.info(
                    "Public access policy created",
                    extra={"event": LogEvent.POLICY_CREATED, "policy": PUBLIC_POLICY_NAME},
                )

            aggregate = await self._get_aggregate()
            updated = aggregate.merge(self._public_statements(space))
            await self._replace_aggregate(updated)

        POLICY_OPERATIONS.labels(operation="add_public").inc()
        logger.info(
            "Public access added for space '%s'",
            space.name,
            extra={
                "event": LogEvent.PUBLIC_ACCESS_ADDED,
                "organization": space.organization.name,
                "space": space.name,
            },
        )

    async def remove_public_access(self, space: Space) -> None:
        """Remove the space's public statements from the aggregate policy.

        Nothing is done when no aggregate exists.

        Raises:
            MultiplePoliciesError: Aggregate name is ambiguous.
        """
        async with self._aggregate_lock:
            if not await self._aggregate_names():
                logger.info(
                    "No public access policy exists, nothing to remove for space '%s'",
                    space.name,
                )
                return

            aggregate = await self._get_aggregate()
            updated = aggregate.subtract(self._public_statements(space))
            await self._replace_aggregate(updated)

        POLICY_OPERATIONS.labels(operation="remove_public").inc()
        logger.info(
            "Public access removed for space '%s'",
            space.name,
            extra={
                "event": LogEvent.PUBLIC_ACCESS_REMOVED,
                "organization": space.organization.name,
                "space": space.name,
            },
        )

    async def release_public_access(self, spaces: Iterable[Space]) -> list[str]:
        """Remove the public statements of every listed space the aggregate holds.

        Returns:
            Names of the spaces whose statements were removed.
        """
        released: list[str] = []
        for space in spaces:
            if self._naming.is_loadingzone(space.name):
                continue
            if await self.has_public_access(space):
                await self.remove_public_access(space)
                released.append(space.name)
        return released

    async def has_public_access(self, space: Space) -> bool:
        """Check if the aggregate currently holds the space's statements."""
        if not await self._aggregate_names():
            return False
        aggregate = await self._get_aggregate()
        return aggregate.contains_all(self._public_statements(space))

    async def get_public_policy(self) -> PolicyDocument:
        """Return the current aggregate policy document."""
        return await self._get_aggregate()

    def _public_statements(self, space: Space) -> list[Statement]:
        return render_statements(
            SPACE_PUBLIC_TEMPLATE, self._bucket, space.organization.name, space.name
        )

    async def _get_aggregate(self) -> PolicyDocument:
        names = await self._aggregate_names()
        if not names:
            raise PolicyNotFoundError(PUBLIC_POLICY_NAME)
        if len(names) > 1:
            raise MultiplePoliciesError(PUBLIC_POLICY_NAME)
        return PolicyDocument.from_json(await self._store.get_policy(names[0]))

    async def _replace_aggregate(self, document: PolicyDocument) -> None:
        await self._store.delete_policy(PUBLIC_POLICY_NAME)
        await self._store.create_policy(PUBLIC_POLICY_NAME, document.to_json())

    async def _aggregate_names(self) -> list[str]:
        # The store matches by prefix; scoped names such as spc_all_public_x_admin share it
        names = await self._store.list_policies(PUBLIC_POLICY_NAME)
        return [name for name in names if name == PUBLIC_POLICY_NAME]
