from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response, status

from ...dependencies import get_current_principal_id, get_role_admin_service
from ...schemas.permission import PermissionResponse
from ...schemas.role import (
    RoleCreate,
    RolePermissionsRequest,
    RolePermissionsResult,
    RoleResponse,
    RoleUpdate,
)
from ...services.admin import RoleAdminService

router = APIRouter(prefix="/roles", tags=["admin-roles"])


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
):
    return await service.list_roles(principal_id)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
):
    return await service.create_role(principal_id, payload)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
):
    return await service.get_role(principal_id, role_id)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    payload: RoleUpdate,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
):
    return await service.update_role(principal_id, role_id, payload)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
) -> Response:
    await service.delete_role(principal_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{role_id}/permissions", response_model=list[PermissionResponse])
async def list_role_permissions(
    role_id: UUID,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
):
    return await service.list_role_permissions(principal_id, role_id)


@router.post("/{role_id}/permissions", response_model=RolePermissionsResult)
async def assign_role_permissions(
    role_id: UUID,
    payload: RolePermissionsRequest,
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
) -> RolePermissionsResult:
    count = await service.assign_permissions(principal_id, role_id, payload.permission_ids)
    return RolePermissionsResult(role_id=role_id, count=count)


@router.delete("/{role_id}/permissions", response_model=RolePermissionsResult)
async def unassign_role_permissions(
    role_id: UUID,
    payload: RolePermissionsRequest = Body(...),
    principal_id: UUID | None = Depends(get_current_principal_id),
    service: RoleAdminService = Depends(get_role_admin_service),
) -> RolePermissionsResult:
    count = await service.unassign_permissions(principal_id, role_id, payload.permission_ids)
    return RolePermissionsResult(role_id=role_id, count=count)
