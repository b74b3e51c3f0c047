"""API v1 schemas.

Consolidated request/response models for all API endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field

from storagemanager import __version__
from storagemanager.core.models import NAME_PATTERN, Confidentiality


# =============================================================================
# Common
# =============================================================================


class OperationResponse(BaseModel):
    """Common operation response."""

    status: Literal["created"]
    organization: str
    space: str | None = None


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = __version__
    provider: str


# =============================================================================
# Organizations
# =============================================================================


class OrganizationRequest(BaseModel):
    """Create organization storage request."""

    name: str = Field(min_length=1, max_length=63, pattern=NAME_PATTERN)


# =============================================================================
# Spaces
# =============================================================================


class SpaceRequest(BaseModel):
    """Create space storage request."""

    name: str = Field(min_length=1, max_length=63, pattern=NAME_PATTERN)
    confidentiality: Confidentiality | None = None
