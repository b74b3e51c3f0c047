"""Policy store interface for access policy documents."""

from abc import ABC, abstractmethod


class PolicyStore(ABC):
    """Interface for named policy document storage.

    Implementations: IamPolicyStore
    """

    @abstractmethod
    async def create_policy(self, name: str, document: str) -> None:
        """Create a named policy.

        Args:
            name: Policy name
            document: Policy document as JSON text
        """
        ...

    @abstractmethod
    async def delete_policy(self, name: str) -> None:
        """Delete a named policy. Deleting an absent policy is a no-op.

        Args:
            name: Policy name
        """
        ...

    @abstractmethod
    async def list_policies(self, prefix: str) -> list[str]:
        """List policy names starting with prefix.

        Args:
            prefix: Policy name prefix (e.g., "acme_")

        Returns:
            Matching policy names
        """
        ...

    @abstractmethod
    async def get_policy(self, name: str) -> str:
        """Return the document of a named policy.

        Args:
            name: Policy name

        Returns:
            Policy document as JSON text

        Raises:
            PolicyNotFoundError: No policy with that name exists.
        """
        ...
