"""Space storage context endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response, status

from storagemanager.api.auth import Principal, require_superuser
from storagemanager.api.dependencies import get_orchestrator
from storagemanager.api.v1.schemas import OperationResponse, SpaceRequest
from storagemanager.core.models import NAME_PATTERN, Confidentiality
from storagemanager.service import StorageOrchestrator

router = APIRouter(prefix="/v2.0/context/organization/{orga_name}/space", tags=["spaces"])

ResourceName = Annotated[str, Path(min_length=1, max_length=63, pattern=NAME_PATTERN)]


@router.post("/", response_model=OperationResponse)
async def create_space_context(
    orga_name: ResourceName,
    request: SpaceRequest,
    principal: Annotated[Principal, Depends(require_superuser)],
    orchestrator: Annotated[StorageOrchestrator, Depends(get_orchestrator)],
) -> OperationResponse:
    """Create the storage context (storage and access policies) of a space."""
    await orchestrator.create_space_storage(orga_name, request.name, request.confidentiality)
    return OperationResponse(status="created", organization=orga_name, space=request.name)


@router.delete("/{space_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_space_context(
    orga_name: ResourceName,
    space_name: ResourceName,
    principal: Annotated[Principal, Depends(require_superuser)],
    orchestrator: Annotated[StorageOrchestrator, Depends(get_orchestrator)],
    confidentiality: Annotated[Confidentiality | None, Query()] = None,
) -> Response:
    """Delete the storage context of a space."""
    await orchestrator.delete_space_storage(orga_name, space_name, confidentiality)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
