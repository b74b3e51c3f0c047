"""Organization storage context endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from storagemanager.api.auth import Principal, require_org_create, require_superuser
from storagemanager.api.dependencies import get_orchestrator
from storagemanager.api.v1.schemas import OperationResponse, OrganizationRequest
from storagemanager.core.models import NAME_PATTERN
from storagemanager.service import StorageOrchestrator

router = APIRouter(prefix="/v2.0/context/organization", tags=["organizations"])

OrganizationName = Annotated[str, Path(min_length=1, max_length=63, pattern=NAME_PATTERN)]


@router.post("/", response_model=OperationResponse)
async def create_organization_context(
    request: OrganizationRequest,
    principal: Annotated[Principal, Depends(require_org_create)],
    orchestrator: Annotated[StorageOrchestrator, Depends(get_orchestrator)],
) -> OperationResponse:
    """Create the storage context (storage and loadingzone) of an organization."""
    await orchestrator.create_organization_storage(request.name)
    return OperationResponse(status="created", organization=request.name)


@router.delete("/{orga_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization_context(
    orga_name: OrganizationName,
    principal: Annotated[Principal, Depends(require_superuser)],
    orchestrator: Annotated[StorageOrchestrator, Depends(get_orchestrator)],
) -> Response:
    """Delete the storage context of an organization including all spaces."""
    await orchestrator.delete_organization_storage(orga_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
