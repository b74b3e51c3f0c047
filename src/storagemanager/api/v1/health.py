"""Health check endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from storagemanager.api.dependencies import get_orchestrator
from storagemanager.api.v1.schemas import HealthResponse
from storagemanager.service import StorageOrchestrator

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    orchestrator: Annotated[StorageOrchestrator, Depends(get_orchestrator)],
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", provider=orchestrator.provider.name)
