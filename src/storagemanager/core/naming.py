"""Resource naming utilities for organization and space storage."""

LOADINGZONE = "loadingzone"
PUBLIC_POLICY_NAME = "spc_all_public"
POLICY_ROLES = ("admin", "trustee", "user", "supplier")


class ResourceNaming:
    """Centralized naming conventions for storage resources and policies."""

    @staticmethod
    def organization_prefix(organization: str) -> str:
        return f"{organization}/"

    @staticmethod
    def space_prefix(organization: str, space: str) -> str:
        return f"{organization}/{space}/"

    @staticmethod
    def policy_name(organization: str, space: str, role: str) -> str:
        return f"{organization}_{space}_{role}"

    @staticmethod
    def space_from_key(organization: str, key: str) -> str | None:
        """Return the space folder an object key lives in, if any.

        "acme/reports/a.csv" -> "reports"; "acme/" and "acme/a.csv" -> None.
        """
        prefix = f"{organization}/"
        if not key.startswith(prefix):
            return None
        space, separator, _ = key[len(prefix) :].partition("/")
        if not separator or not space:
            return None
        return space

    @staticmethod
    def is_loadingzone(space: str) -> bool:
        return space.lower() == LOADINGZONE
