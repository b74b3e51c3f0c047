"""API dependencies for dependency injection."""

import asyncio

from storagemanager.config import ManagerConfig
from storagemanager.providers import create_provider
from storagemanager.service import StorageOrchestrator

# Singleton orchestrator instance
_orchestrator: StorageOrchestrator | None = None


async def init_orchestrator(config: ManagerConfig, cancel: asyncio.Event | None = None) -> None:
    """Initialize orchestrator singleton.

    Creates the configured provider and initializes its async resources.
    Must be called during app startup.
    """
    global _orchestrator
    provider = create_provider(config, cancel=cancel)
    await provider.init()
    _orchestrator = StorageOrchestrator(provider)


async def close_orchestrator() -> None:
    """Close provider clients and release resources."""
    global _orchestrator
    if _orchestrator:
        await _orchestrator.provider.close()
        _orchestrator = None


def get_orchestrator() -> StorageOrchestrator:
    """Get orchestrator singleton.

    Raises:
        RuntimeError: If called before init_orchestrator().
    """
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized. Call init_orchestrator() first.")
    return _orchestrator


def reset_orchestrator() -> None:
    """Reset orchestrator singleton (for testing)."""
    global _orchestrator
    _orchestrator = None
