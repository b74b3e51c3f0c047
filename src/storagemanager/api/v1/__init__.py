"""API v1 module."""

from storagemanager.api.v1.health import router as health_router
from storagemanager.api.v1.organizations import router as organizations_router
from storagemanager.api.v1.spaces import router as spaces_router

__all__ = [
    "health_router",
    "organizations_router",
    "spaces_router",
]
