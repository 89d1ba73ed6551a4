from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ...dependencies import get_current_principal_id, get_permission_admin_service
from ...schemas.permission import PermissionCreate, PermissionResponse, PermissionUpdate
from ...services.admin import PermissionAdminService

router = APIRouter(prefix="/permissions", tags=["admin-permissions"])


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: PermissionAdminService = Depends(get_permission_admin_service),
):
    return await service.list_permissions(principal_id)


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: PermissionAdminService = Depends(get_permission_admin_service),
):
    return await service.create_permission(principal_id, payload)


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: PermissionAdminService = Depends(get_permission_admin_service),
):
    return await service.get_permission(principal_id, permission_id)


@router.put("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: UUID,
    payload: PermissionUpdate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: PermissionAdminService = Depends(get_permission_admin_service),
):
    return await service.update_permission(principal_id, permission_id, payload)


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: PermissionAdminService = Depends(get_permission_admin_service),
) -> Response:
    await service.delete_permission(principal_id, permission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
