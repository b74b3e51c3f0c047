"""Storage provider interface for organization and space storage."""

from abc import ABC, abstractmethod

from storagemanager.core.models import Organization, Space
from storagemanager.policies.manager import PolicyManager


class StorageProvider(ABC):
    """Interface for backend storage operations.

    Create operations are idempotent: existing storage is logged as a
    warning and left untouched. Delete operations on absent storage are
    no-ops.

    Implementations: AzureBlobProvider, S3PrefixProvider, LocalDirProvider
    """

    name: str = ""

    # True when create_organization_storage also creates the loadingzone
    implicit_loadingzone: bool = False

    @property
    def policies(self) -> PolicyManager | None:
        """Policy manager when the backend governs space access with policies."""
        return None

    async def init(self) -> None:
        """Initialize async resources (clients, buckets)."""

    async def close(self) -> None:
        """Release clients."""

    @abstractmethod
    async def create_organization_storage(self, organization: Organization) -> None:
        """Create the top-level storage of an organization.

        Args:
            organization: Organization to create storage for
        """
        ...

    @abstractmethod
    async def create_loadingzone(self, organization: Organization) -> None:
        """Create the loadingzone space of an organization.

        Args:
            organization: Organization owning the loadingzone
        """
        ...

    @abstractmethod
    async def create_space_storage(self, space: Space) -> None:
        """Create the storage of a space inside its organization.

        Args:
            space: Space to create storage for
        """
        ...

    @abstractmethod
    async def delete_organization_storage(self, organization: Organization) -> None:
        """Delete an organization's storage including all of its spaces.

        Args:
            organization: Organization to delete storage for
        """
        ...

    @abstractmethod
    async def delete_space_storage(self, space: Space) -> None:
        """Delete the storage of a space.

        Args:
            space: Space to delete storage for
        """
        ...
