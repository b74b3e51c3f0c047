"""Organization lock for storage operations."""

import asyncio

_organization_locks: dict[str, asyncio.Lock] = {}


def get_organization_lock(organization: str) -> asyncio.Lock:
    """Get or create a per-organization lock.

    Concurrent create/delete calls against the same organization or its
    spaces would otherwise race on the shared backend state.

    All organization and space operations share this lock.
    """
    if organization not in _organization_locks:
        _organization_locks[organization] = asyncio.Lock()
    return _organization_locks[organization]


def reset_locks() -> None:
    """Drop all locks (for testing)."""
    _organization_locks.clear()
